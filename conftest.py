import pytest

from studydoc import Converter


@pytest.fixture
def converter():
    return Converter()


@pytest.fixture
def round_trip(converter):
    def round_trip(markdown, key=None):
        tree = converter.to_tree(markdown, "markdown")
        tree.check()
        result = converter.to_markdown(tree)
        if key is None:
            assert result == markdown
        else:
            assert key(result, markdown)
        return tree
    return round_trip
