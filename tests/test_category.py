import pytest

from wwwsite.category import Category, UnknownCategory, is_category


@pytest.fixture
def templates(tmp_path):
    learn = tmp_path / "learn"
    learn.mkdir()
    (learn / "index.html.hbs").write_text("{{> layout}}")
    (tmp_path / "empty").mkdir()
    return tmp_path


def test_is_category(templates):
    assert is_category("learn", templates) is True
    assert is_category("empty", templates) is False
    assert is_category("missing", templates) is False


def test_from_param_ok(templates):
    category = Category.from_param("learn", templates)
    assert category.name == "learn"
    assert category.index() == "learn/index"


def test_from_param_unknown(templates):
    with pytest.raises(UnknownCategory) as info:
        Category.from_param("nope", templates)
    assert str(info.value) == "No category called <nope>"


def test_from_param_unknown_is_value_error(templates):
    with pytest.raises(ValueError):
        Category.from_param("empty", templates)


def test_index_starts_with_name():
    category = Category("tools")
    assert category.index().startswith(category.name + "/")