"""Tests for hami.core.node: construction, wiring, lifecycle and retries."""

import pytest

from hami.core.errors import ConfigurationError
from hami.core.node import DEFAULT_ACTION, Node, Transition

from tests._support.nodes import FlakyNode, RecordingNode


class ConfiguredNode(Node):
    config_schema = {
        "type": "object",
        "required": ["name"],
        "properties": {"name": {"type": "string", "minLength": 1}},
    }

    def kind(self) -> str:
        return "test:configured"


class TestConstruction:
    def test_defaults(self):
        node = Node()
        assert node.kind() == "hami-node"
        assert node.config is None
        assert node.max_retries == 1
        assert node.wait == 0
        assert node.successors == {}

    def test_valid_config_is_kept(self):
        node = ConfiguredNode({"name": "a"})
        assert node.config == {"name": "a"}

    def test_invalid_config_raises(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ConfiguredNode({"name": 1})
        assert exc_info.value.errors == ["name must be of type string, got number"]
        assert exc_info.value.kind == "test:configured"

    def test_empty_config_skips_validation(self):
        assert ConfiguredNode({}).config == {}
        assert ConfiguredNode().config is None

    def test_validate_config_without_schema(self):
        assert Node().validate_config({"anything": 1}).valid

    @pytest.mark.parametrize("kwargs", [{"max_retries": 0}, {"wait": -1}])
    def test_rejects_bad_retry_settings(self, kwargs):
        with pytest.raises(ValueError):
            Node(**kwargs)


class TestWiring:
    def test_next_returns_successor_for_chaining(self):
        a, b, c = Node(), Node(), Node()
        assert a.next(b).next(c) is c
        assert a.get_successor(DEFAULT_ACTION) is b
        assert b.get_successor("default") is c

    def test_on_registers_named_action(self):
        a, err = Node(), Node()
        a.on("error", err)
        assert a.get_successor("error") is err
        assert a.get_successor("default") is None

    def test_none_action_looks_up_default(self):
        a, b = Node(), Node()
        a.next(b)
        assert a.get_successor(None) is b

    def test_overwrite_replaces_successor(self):
        a, b, c = Node(), Node(), Node()
        a.next(b)
        a.next(c)
        assert a.get_successor("default") is c


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_default_lifecycle_returns_default(self):
        assert await Node().run({}) == "default"

    @pytest.mark.asyncio
    async def test_phases_see_each_other(self):
        class Doubler(Node):
            async def prepare(self, shared):
                return shared["n"]

            async def execute(self, prep_res):
                return prep_res * 2

            async def finalize(self, shared, prep_res, exec_res):
                shared["doubled"] = exec_res
                return "done"

        shared = {"n": 4}
        assert await Doubler().run(shared) == "done"
        assert shared["doubled"] == 8

    @pytest.mark.asyncio
    async def test_run_ignores_successors(self):
        first = RecordingNode("first")
        first.next(RecordingNode("second"))
        shared = {}
        await first.run(shared)
        assert shared["visited"] == ["first"]

    @pytest.mark.asyncio
    async def test_transition_from_finalize(self):
        spliced = Node()

        class Splicer(Node):
            async def finalize(self, shared, prep_res, exec_res):
                return Transition("go", splice=spliced)

        transition = await Splicer()._run({})
        assert transition == Transition("go", splice=spliced)
        assert await Splicer().run({}) == "go"

    def test_transition_coerce(self):
        assert Transition.coerce("x") == Transition("x")
        assert Transition.coerce(None) == Transition()
        t = Transition("y")
        assert Transition.coerce(t) is t


class TestRetry:
    @pytest.mark.asyncio
    async def test_succeeds_within_budget(self):
        node = FlakyNode(failures=2, max_retries=3)
        shared = {}
        await node.run(shared)
        assert node.attempts == 3
        assert shared["flaky_result"] == "ok"

    @pytest.mark.asyncio
    async def test_final_failure_propagates(self):
        node = FlakyNode(failures=5, max_retries=2)
        with pytest.raises(RuntimeError, match="attempt 2 failed"):
            await node.run({})
        assert node.attempts == 2

    @pytest.mark.asyncio
    async def test_handle_error_provides_fallback(self):
        class Fallback(FlakyNode):
            async def handle_error(self, error, attempt):
                return f"fallback after {attempt}"

        node = Fallback(failures=5, max_retries=2)
        shared = {}
        await node.run(shared)
        assert shared["flaky_result"] == "fallback after 2"

    @pytest.mark.asyncio
    async def test_wait_between_attempts(self, monkeypatch):
        sleeps = []

        async def fake_sleep(seconds):
            sleeps.append(seconds)

        monkeypatch.setattr("hami.core.node.asyncio.sleep", fake_sleep)
        node = FlakyNode(failures=2, max_retries=3, wait=0.5)
        await node.run({})
        assert sleeps == [0.5, 0.5]

    @pytest.mark.asyncio
    async def test_prepare_errors_are_not_retried(self):
        class BadPrepare(FlakyNode):
            async def prepare(self, shared):
                raise KeyError("missing")

        node = BadPrepare(max_retries=3)
        with pytest.raises(KeyError):
            await node.run({})
        assert node.attempts == 0
