import pytest

from tagtree.core.exceptions import TreeInvariantError
from tagtree.core.services.drag_drop_service import DragDropService, OperationResult


def shape(nodes):
    return [(n.id, shape(n.children)) for n in nodes]


def x_for(depth):
    return 12 + depth * 24 + 5


class TestGestureLifecycle:
    """begin / hover / drop / cancel."""

    def test_idle_state(self, drag_service):
        assert drag_service.is_dragging is False
        assert drag_service.active_id is None
        assert drag_service.dragged_node is None
        assert drag_service.flat_nodes == []
        assert drag_service.current_indicator is None

    def test_begin_sets_state(self, drag_service, simple_tree):
        result = drag_service.begin(simple_tree, "C")
        assert isinstance(result, OperationResult)
        assert result.success is True
        assert drag_service.is_dragging is True
        assert drag_service.active_id == "C"
        assert drag_service.dragged_node.depth == 1
        assert [e.id for e in drag_service.flat_nodes] == ["A", "B", "C"]

    def test_begin_unknown_element(self, drag_service, simple_tree):
        result = drag_service.begin(simple_tree, "ghost")
        assert result.success is False
        assert result.details == {"element_id": "ghost"}
        assert drag_service.is_dragging is False

    def test_flat_move_scenario(self, drag_service, simple_tree, sample):
        drag_service.begin(simple_tree, "C")
        indicator = drag_service.hover(sample("B", x_for(1), row=1))
        assert indicator is not None
        result = drag_service.drop()
        assert result.success is True
        assert shape(result.details["nodes"]) == [("A", [("C", []), ("B", [])])]
        assert result.details["element_id"] == "C"
        assert drag_service.is_dragging is False

    def test_nesting_scenario(self, drag_service, simple_tree, sample):
        drag_service.begin(simple_tree, "C")
        indicator = drag_service.hover(sample("B", x_for(2), row=1))
        assert indicator.intent.insertion_kind == "first-child"
        result = drag_service.drop()
        assert shape(result.details["nodes"]) == [("A", [("B", [("C", [])])])]

    def test_cycle_scenario(self, drag_service, chain_tree, sample):
        drag_service.begin(chain_tree, "A")
        assert drag_service.can_drop("C") is False
        assert drag_service.hover(sample("C", x_for(3), row=2)) is None
        result = drag_service.drop()
        assert result.success is False
        assert "nodes" not in (result.details or {})

    def test_tail_scenario(self, drag_service, node, sample):
        tree = [node("X"), node("A"), node("B")]
        drag_service.begin(tree, "X")
        assert drag_service.can_drop("__end__") is True
        indicator = drag_service.hover(sample("__end__", x_for(4), row=3))
        assert indicator.intent.target_id == "B"
        result = drag_service.drop()
        assert shape(result.details["nodes"]) == [("A", []), ("B", []), ("X", [])]

    def test_last_tick_wins(self, drag_service, simple_tree, sample):
        drag_service.begin(simple_tree, "C")
        drag_service.hover(sample("B", x_for(2), row=1))
        drag_service.hover(sample("B", x_for(1), row=1))
        result = drag_service.drop()
        assert shape(result.details["nodes"]) == [("A", [("C", []), ("B", [])])]

    def test_invalid_last_tick_drops_nothing(self, drag_service, simple_tree, sample):
        drag_service.begin(simple_tree, "C")
        drag_service.hover(sample("B", x_for(1), row=1))
        assert drag_service.hover(sample("C", x_for(1), row=2)) is None
        result = drag_service.drop()
        assert result.success is False

    def test_cancel_discards_intent(self, drag_service, simple_tree, sample):
        drag_service.begin(simple_tree, "C")
        drag_service.hover(sample("B", x_for(1), row=1))
        drag_service.cancel()
        assert drag_service.is_dragging is False
        assert drag_service.current_indicator is None
        assert drag_service.drop().details == {"reason": "idle"}

    def test_hover_when_idle(self, drag_service, sample):
        assert drag_service.hover(sample("B", x_for(1))) is None
        assert drag_service.can_drop("B") is False

    def test_begin_restarts_active_gesture(self, drag_service, simple_tree, sample):
        drag_service.begin(simple_tree, "C")
        drag_service.hover(sample("B", x_for(1), row=1))
        drag_service.begin(simple_tree, "B")
        assert drag_service.active_id == "B"
        assert drag_service.current_indicator is None

    def test_caller_tree_is_not_mutated(self, drag_service, document_tree, sample):
        before = [n.to_dict() for n in document_tree]
        drag_service.begin(document_tree, "rules")
        drag_service.hover(sample("footer", x_for(0), row=7))
        result = drag_service.drop()
        assert result.success is True
        assert [n.to_dict() for n in document_tree] == before

    def test_invariant_breach_raises(self, drag_service, simple_tree, sample, monkeypatch):
        from tagtree.core.services import drag_drop_service as module

        def broken(*_args, **_kwargs):
            raise TreeInvariantError("broken")

        monkeypatch.setattr(module, "verify_flat", broken)
        drag_service.begin(simple_tree, "C")
        drag_service.hover(sample("B", x_for(1), row=1))
        with pytest.raises(TreeInvariantError):
            drag_service.drop()
        assert drag_service.is_dragging is False


class TestMoveElement:
    """Programmatic before / after / child moves."""

    def test_before(self, drag_service, simple_tree):
        result = drag_service.move_element(simple_tree, "C", "B", "before")
        assert result.success is True
        assert shape(result.details["nodes"]) == [("A", [("C", []), ("B", [])])]

    def test_after(self, drag_service, document_tree):
        result = drag_service.move_element(document_tree, "intro", "outro", "after")
        assert shape(result.details["nodes"])[0] == (
            "doc",
            [("rules", [("rule1", []), ("rule2", [("example", [])])]), ("outro", []), ("intro", [])],
        )

    def test_child(self, drag_service, document_tree):
        result = drag_service.move_element(document_tree, "footer", "rule1", "child")
        rules = shape(result.details["nodes"])[0][1][1]
        assert rules == ("rules", [("rule1", [("footer", [])]), ("rule2", [("example", [])])])

    def test_cycle_refused(self, drag_service, chain_tree):
        result = drag_service.move_element(chain_tree, "A", "C", "child")
        assert result.success is False
        assert "own subtree" in result.message

    def test_self_refused(self, drag_service, chain_tree):
        result = drag_service.move_element(chain_tree, "B", "B", "before")
        assert result.success is False

    def test_unsupported_drop_type(self, drag_service, simple_tree):
        result = drag_service.move_element(simple_tree, "C", "B", "inside")
        assert result.success is False
        assert result.details == {"allowed": ["before", "after", "child"]}


class TestSettingsFromConfig:

    def test_defaults_loaded_from_packaged_config(self, isolated_config):
        service = DragDropService()
        assert service.settings.indent_unit == 24
        assert service.settings.content_padding == 12
        assert service.settings.end_sentinel_id == "__end__"

    def test_user_override(self, isolated_config):
        (isolated_config / "drag.yml").write_text("indent_unit: 16\n", encoding="utf-8")
        service = DragDropService()
        assert service.settings.indent_unit == 16
        assert service.settings.content_padding == 12
