"""Tests for the option bridge exposed to scripts."""

from unittest.mock import Mock

import pytest

from scriptable_editor.options.errors import HostStateError, ValidationError
from scriptable_editor.options.models import WindowLocalOptions
from scriptable_editor.options.store import HostOptionStore
from scriptable_editor.scripting.bridge import (
    MANAGED_OPTIONS,
    OptionBridge,
    accessor_names,
    create_option_bridge,
)


class TestRoundTrip:
    """A successful set is observed by the next get."""

    @pytest.mark.parametrize("value", [True, False])
    def test_wrap(self, bridge: OptionBridge, value: bool) -> None:
        bridge.opt_set_wrap(value)
        assert bridge.opt_get_wrap() is value

    @pytest.mark.parametrize("value", [True, False])
    def test_line_break(self, bridge: OptionBridge, value: bool) -> None:
        bridge.opt_set_line_break(value)
        assert bridge.opt_get_line_break() is value

    def test_break_at_every_host_class(
        self, bridge: OptionBridge, store: HostOptionStore
    ) -> None:
        """Every class the host defines is accepted and reflected."""
        for name in store.break_at_classes():
            bridge.opt_set_break_at(name)
            assert bridge.opt_get_break_at() == name

    def test_set_wrap_from_false(self) -> None:
        """Initial wrap=false, set true, read true."""
        store = HostOptionStore(local=WindowLocalOptions(wrap=False))
        store.initialize()
        bridge = create_option_bridge(store)

        assert bridge.opt_get_wrap() is False
        bridge.opt_set_wrap(True)
        assert bridge.opt_get_wrap() is True

    def test_repeated_reads_are_identical(self, bridge: OptionBridge) -> None:
        """Two reads with no write in between agree."""
        assert bridge.opt_get_line_break() == bridge.opt_get_line_break()

    def test_reads_reflect_host_writes(
        self, bridge: OptionBridge, store: HostOptionStore
    ) -> None:
        """The bridge never caches: host-side writes are seen immediately."""
        assert bridge.opt_get_break_at() == "ascii"
        store.set_break_at("whitespace")
        assert bridge.opt_get_break_at() == "whitespace"


class TestValidation:
    """Rejected writes raise ValidationError and leave the store unchanged."""

    def test_unknown_break_at_class(
        self, bridge: OptionBridge, store: HostOptionStore
    ) -> None:
        """break_at="ascii", set "bogus": fails and "ascii" remains."""
        assert bridge.opt_get_break_at() == "ascii"

        with pytest.raises(ValidationError) as exc_info:
            bridge.opt_set_break_at("bogus")

        assert exc_info.value.option == "break_at"
        assert exc_info.value.value == "bogus"
        assert "break_at" in str(exc_info.value)
        assert "bogus" in str(exc_info.value)
        assert bridge.opt_get_break_at() == "ascii"
        assert store.break_at() == "ascii"

    @pytest.mark.parametrize(
        "value", ["not-a-real-class", "", "ASCII", " ascii", "whitespace "]
    )
    def test_break_at_outside_enumeration(
        self, bridge: OptionBridge, value: str
    ) -> None:
        with pytest.raises(ValidationError):
            bridge.opt_set_break_at(value)
        assert bridge.opt_get_break_at() == "ascii"

    @pytest.mark.parametrize("value", [1, 0, "true", None, 1.0, [True]])
    def test_wrap_rejects_non_bool(self, bridge: OptionBridge, value: object) -> None:
        """Booleans must be real bools; ints and strings are refused."""
        with pytest.raises(ValidationError) as exc_info:
            bridge.opt_set_wrap(value)  # type: ignore[arg-type]
        assert exc_info.value.option == "wrap"
        assert bridge.opt_get_wrap() is True

    @pytest.mark.parametrize("value", [1, "false", None])
    def test_line_break_rejects_non_bool(
        self, bridge: OptionBridge, value: object
    ) -> None:
        with pytest.raises(ValidationError):
            bridge.opt_set_line_break(value)  # type: ignore[arg-type]
        assert bridge.opt_get_line_break() is False

    @pytest.mark.parametrize("value", [None, 3, True, b"ascii"])
    def test_break_at_rejects_non_str(self, bridge: OptionBridge, value: object) -> None:
        with pytest.raises(ValidationError):
            bridge.opt_set_break_at(value)  # type: ignore[arg-type]
        assert bridge.opt_get_break_at() == "ascii"

    def test_membership_delegated_to_store(self) -> None:
        """The bridge asks the store and never writes on a refusal."""
        store = Mock(spec=HostOptionStore)
        store.is_valid_value.return_value = False
        bridge = OptionBridge(store)

        with pytest.raises(ValidationError):
            bridge.opt_set_break_at("anything")

        store.is_valid_value.assert_called_once_with("break_at", "anything")
        store.set_option.assert_not_called()

    def test_host_extension_accepted_without_bridge_change(self) -> None:
        """A class added by the host is accepted as-is."""
        store = HostOptionStore(
            break_at_classes={"ascii": " ,.", "cjk": "、。"}
        )
        store.initialize()
        bridge = create_option_bridge(store)

        bridge.opt_set_break_at("cjk")
        assert bridge.opt_get_break_at() == "cjk"

    def test_store_refusal_becomes_validation_error(self) -> None:
        store = Mock(spec=HostOptionStore)
        store.set_option.side_effect = ValueError("refused by host")
        bridge = OptionBridge(store)

        with pytest.raises(ValidationError, match="refused by host"):
            bridge.opt_set_wrap(True)


class TestHostState:
    """Reads and writes against an unavailable store raise HostStateError."""

    def test_closed_store(self, bridge: OptionBridge, store: HostOptionStore) -> None:
        store.close()

        with pytest.raises(HostStateError):
            bridge.opt_get_wrap()
        with pytest.raises(HostStateError):
            bridge.opt_set_break_at("ascii")

    def test_uninitialized_store(self) -> None:
        bridge = create_option_bridge(HostOptionStore())

        with pytest.raises(HostStateError):
            bridge.opt_get_line_break()

    def test_detached_bridge(self, bridge: OptionBridge, store: HostOptionStore) -> None:
        bridge.detach()

        assert not bridge.attached
        with pytest.raises(HostStateError) as exc_info:
            bridge.opt_get_break_at()
        assert exc_info.value.state == "detached"
        with pytest.raises(HostStateError):
            bridge.opt_set_wrap(False)
        assert store.wrap() is True

    def test_type_mismatch_from_store(self) -> None:
        """A store returning the wrong type is reported, not passed through."""
        store = Mock(spec=HostOptionStore)
        store.get_option.return_value = None
        bridge = OptionBridge(store)

        with pytest.raises(HostStateError) as exc_info:
            bridge.opt_get_wrap()
        assert exc_info.value.state == "inconsistent"

    def test_invalid_boolean_type_not_leaked(self) -> None:
        """An int from the store is not mistaken for a boolean."""
        store = Mock(spec=HostOptionStore)
        store.get_option.return_value = 1
        bridge = OptionBridge(store)

        with pytest.raises(HostStateError):
            bridge.opt_get_line_break()


class TestSurface:
    """The set of accessors exposed to scripts."""

    def test_managed_options(self) -> None:
        assert [(o.name, o.value_type, o.enumerated) for o in MANAGED_OPTIONS] == [
            ("wrap", bool, False),
            ("line_break", bool, False),
            ("break_at", str, True),
        ]

    def test_callables(self, bridge: OptionBridge) -> None:
        methods = bridge.callables()
        assert set(methods) == {
            "opt_get_wrap",
            "opt_set_wrap",
            "opt_get_line_break",
            "opt_set_line_break",
            "opt_get_break_at",
            "opt_set_break_at",
        }
        assert set(methods) == accessor_names()

        methods["opt_set_line_break"](True)
        assert methods["opt_get_line_break"]() is True
