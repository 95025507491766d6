"""Tests for uno.container: registration, autowiring, caching, cycles."""

import threading

import pytest

from uno.container import ABSENT, Container, needs
from uno.errors import CyclicDependency, UnresolvedDependency


class Counter:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> object:
        self.calls += 1
        return object()


# =============================================================================
# Registration
# =============================================================================


class TestRegistration:
    def test_registers_itself(self) -> None:
        container = Container()
        assert container.resolve("container") is container

    def test_names_are_case_insensitive(self) -> None:
        container = Container()
        container.register("Config", lambda: {"debug": True})
        assert container.has("config")
        assert container.resolve("CONFIG") == {"debug": True}

    def test_sigil_is_stripped(self) -> None:
        container = Container()
        container.register("#token", lambda: "t")
        assert container.has("token")
        assert not container.has("#token")

    def test_overwrite_replaces_entry(self) -> None:
        container = Container()
        container.register("greeting", lambda: "hello")
        container.register("greeting", lambda: "bonjour")
        assert container.resolve("greeting") == "bonjour"

    def test_names_in_registration_order(self) -> None:
        container = Container()
        container.register("b", lambda: 2)
        container.register("a", lambda: 1)
        assert container.names() == ["container", "b", "a"]


# =============================================================================
# Caching
# =============================================================================


class TestCaching:
    def test_cached_factory_runs_once(self) -> None:
        container = Container()
        factory = Counter()
        container.register("thing", factory)
        first = container.resolve("thing")
        second = container.resolve("thing")
        assert first is second
        assert factory.calls == 1

    def test_factory_not_called_at_registration(self) -> None:
        container = Container()
        factory = Counter()
        container.register("thing", factory)
        assert factory.calls == 0

    def test_sigil_disables_caching(self) -> None:
        container = Container()
        factory = Counter()
        container.register("#thing", factory)
        assert container.resolve("thing") is not container.resolve("thing")
        assert factory.calls == 2

    def test_cached_false_disables_caching(self) -> None:
        container = Container()
        factory = Counter()
        container.register("thing", factory, cached=False)
        container.resolve("thing")
        container.resolve("thing")
        assert factory.calls == 2

    def test_uncached_rebuilds_uncached_chain(self) -> None:
        container = Container()
        inner = Counter()
        container.register("#inner", inner)
        container.register("#outer", lambda inner: ("outer", inner))
        a = container.resolve("outer")
        b = container.resolve("outer")
        assert a[1] is not b[1]
        assert inner.calls == 2

    def test_concurrent_first_resolution_builds_once(self) -> None:
        container = Container()
        factory = Counter()
        container.register("thing", factory)
        results: list[object] = []

        def worker() -> None:
            results.append(container.resolve("thing"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert factory.calls == 1
        assert all(r is results[0] for r in results)


# =============================================================================
# Autowiring
# =============================================================================


class TestAutowiring:
    def test_parameters_resolved_by_name(self) -> None:
        container = Container()
        container.register("host", lambda: "localhost")
        container.register("port", lambda: 5432)
        container.register("dsn", lambda host, port: f"{host}:{port}")
        assert container.resolve("dsn") == "localhost:5432"

    def test_parameter_names_case_insensitive(self) -> None:
        container = Container()
        container.register("apikey", lambda: "k")
        assert container.call(lambda apiKey: apiKey) == "k"

    def test_explicit_needs_at_registration(self) -> None:
        container = Container()
        container.register("a", lambda: 1)
        container.register("b", lambda: 2)
        container.register("pair", lambda x, y: (x, y), needs=("b", "a"))
        assert container.resolve("pair") == (2, 1)

    def test_needs_decorator(self) -> None:
        container = Container()
        container.register("config", lambda: "cfg")

        @needs("config")
        def make(cfg):
            return f"made with {cfg}"

        assert container.call(make) == "made with cfg"

    def test_empty_needs_calls_without_arguments(self) -> None:
        container = Container()
        container.register("fn", lambda value=42: value, needs=())
        assert container.resolve("fn") == 42

    def test_unregistered_default_is_kept(self) -> None:
        container = Container()
        assert container.call(lambda limit=10: limit) == 10

    def test_registered_name_overrides_default(self) -> None:
        container = Container()
        container.register("limit", lambda: 50)
        assert container.call(lambda limit=10: limit) == 50

    def test_var_args_left_empty(self) -> None:
        container = Container()
        assert container.call(lambda *args, **kwargs: (args, kwargs)) == ((), {})

    def test_positional_only_parameters(self) -> None:
        container = Container()
        container.register("a", lambda: "A")

        def func(a, /):
            return a

        assert container.call(func) == "A"


# =============================================================================
# Failures
# =============================================================================


class TestFailures:
    def test_unregistered_name_raises(self) -> None:
        container = Container()
        with pytest.raises(UnresolvedDependency, match="missed dependency: nothing") as exc_info:
            container.resolve("nothing")
        assert exc_info.value.name == "nothing"

    def test_unresolved_is_lookup_error(self) -> None:
        assert issubclass(UnresolvedDependency, LookupError)

    def test_missing_parameter_dependency_raises(self) -> None:
        container = Container()
        container.register("service", lambda repo: repo)
        with pytest.raises(UnresolvedDependency) as exc_info:
            container.resolve("service")
        assert exc_info.value.name == "repo"

    def test_failed_factory_is_not_cached(self) -> None:
        container = Container()
        attempts: list[int] = []

        def flaky():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("boom")
            return "ok"

        container.register("flaky", flaky)
        with pytest.raises(RuntimeError):
            container.resolve("flaky")
        assert container.resolve("flaky") == "ok"

    def test_self_cycle_detected(self) -> None:
        container = Container()
        container.register("loop", lambda loop: loop)
        with pytest.raises(CyclicDependency, match="loop -> loop"):
            container.resolve("loop")

    def test_indirect_cycle_reports_chain(self) -> None:
        container = Container()
        container.register("a", lambda b: b)
        container.register("b", lambda c: c)
        container.register("c", lambda a: a)
        with pytest.raises(CyclicDependency) as exc_info:
            container.resolve("a")
        assert exc_info.value.chain == ("a", "b", "c", "a")

    def test_cycle_does_not_poison_later_resolution(self) -> None:
        container = Container()
        container.register("a", lambda b: b)
        container.register("b", lambda a: a)
        with pytest.raises(CyclicDependency):
            container.resolve("a")
        container.register("b", lambda: "fixed")
        assert container.resolve("a") == "fixed"


# =============================================================================
# Optional resolution
# =============================================================================


class TestOptionalResolution:
    def test_resolve_optional_missing(self) -> None:
        container = Container()
        assert container.resolve_optional("missing") is ABSENT
        assert not ABSENT

    def test_resolve_optional_present(self) -> None:
        container = Container()
        container.register("x", lambda: 1)
        assert container.resolve_optional("x") == 1

    def test_try_resolve(self) -> None:
        container = Container()
        container.register("x", lambda: None)
        assert container.try_resolve("x") == (None, True)
        assert container.try_resolve("y") == (None, False)

    def test_nested_miss_still_raises(self) -> None:
        container = Container()
        container.register("service", lambda repo: repo)
        with pytest.raises(UnresolvedDependency):
            container.try_resolve("service")
