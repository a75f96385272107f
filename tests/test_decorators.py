import pytest

from licgate.common.decorators import requires_active_license, requires_feature
from licgate.common.exceptions import FeatureAccessError

from conftest import FakeCache, FakeTransport


@pytest.fixture
def licensed(make_manager, cached_record):
    manager = make_manager(cache=FakeCache(cached_record))
    manager.initialize()
    return manager


@pytest.fixture
def unlicensed(make_manager):
    manager = make_manager(cache=FakeCache())
    manager.initialize()
    return manager


def test_requires_feature_allows(licensed) -> None:
    @requires_feature(licensed, "TextBox")
    def add_text_box() -> str:
        return "added"

    assert add_text_box() == "added"


def test_requires_feature_raises(unlicensed) -> None:
    @requires_feature(unlicensed, "TextBox")
    def add_text_box() -> str:
        return "added"

    with pytest.raises(FeatureAccessError) as exc_info:
        add_text_box()
    assert exc_info.value.feature_id == "TextBox"
    assert "TextBox" in str(exc_info.value)


def test_requires_feature_without_exception(unlicensed) -> None:
    @requires_feature(unlicensed, "TextBox", raise_exception=False)
    def add_text_box() -> str:
        return "added"

    assert add_text_box() is None


def test_manager_from_callable(licensed) -> None:
    @requires_feature(lambda: licensed, "AlignLeft")
    def align() -> str:
        return "aligned"

    assert align() == "aligned"


def test_manager_from_attribute(licensed, unlicensed) -> None:
    class Toolbar:
        def __init__(self, manager):
            self.manager = manager

        @requires_feature("manager", "TextBox", "Upgrade to use text boxes")
        def add_text_box(self) -> str:
            return "added"

    assert Toolbar(licensed).add_text_box() == "added"
    with pytest.raises(FeatureAccessError, match="Upgrade"):
        Toolbar(unlicensed).add_text_box()


def test_attribute_lookup_needs_self() -> None:
    @requires_feature("manager", "TextBox")
    def standalone() -> None:
        return None

    with pytest.raises(ValueError, match="without self"):
        standalone()


def test_requires_active_license(licensed, unlicensed) -> None:
    def export() -> str:
        return "exported"

    assert requires_active_license(licensed)(export)() == "exported"
    with pytest.raises(FeatureAccessError, match="not active"):
        requires_active_license(unlicensed)(export)()
    assert requires_active_license(unlicensed, raise_exception=False)(export)() is None


def test_decorated_function_keeps_metadata(licensed) -> None:
    @requires_feature(licensed, "TextBox")
    def add_text_box() -> str:
        """Insert a text box."""
        return "added"

    assert add_text_box.__name__ == "add_text_box"
    assert add_text_box.__doc__ == "Insert a text box."


def test_feature_checked_at_call_time(make_manager, cached_record) -> None:
    transport = FakeTransport()
    manager = make_manager(cache=FakeCache(cached_record), transport=transport)

    @requires_feature(manager, "TextBox", raise_exception=False)
    def add_text_box() -> str:
        return "added"

    assert add_text_box() is None
    manager.initialize()
    assert add_text_box() == "added"
