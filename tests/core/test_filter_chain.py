from core.filters import FilterChain, return_true


def test_apply_without_transforms_is_identity():
    chain = FilterChain()
    value = ["a", "b"]
    assert chain.apply("fields", value, scope="x") is value


def test_priority_then_registration_order():
    chain = FilterChain()
    chain.add("p", lambda v: v + ["late"], priority=20)
    chain.add("p", lambda v: v + ["first"])
    chain.add("p", lambda v: v + ["second"])
    assert chain.apply("p", []) == ["first", "second", "late"]


def test_scopes_are_isolated():
    chain = FilterChain()
    chain.add("enabled_setting:all", return_true, scope="a")
    assert chain.apply("enabled_setting:all", False, scope="a") is True
    assert chain.apply("enabled_setting:all", False, scope="b") is False
    assert chain.apply("enabled_setting:all", False) is False


def test_extra_args_passed_through():
    chain = FilterChain()
    chain.add("setting:title", lambda v, suffix: v + suffix)
    assert chain.apply("setting:title", "abc", "!") == "abc!"


def test_remove_by_handle_and_by_name():
    chain = FilterChain()
    remove = chain.add("p", lambda v: v + 1)
    chain.add("p", lambda v: v * 10, name="times10")
    assert chain.apply("p", 1) == 20
    remove()
    assert chain.apply("p", 1) == 10
    assert chain.remove("p", "times10") == 1
    assert not chain.has("p")
    assert chain.apply("p", 1) == 1
