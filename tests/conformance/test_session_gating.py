"""
Session Gating Conformance Tests

INVARIANT: The login stack only grows through an authorized su and only
shrinks through logout.

    su u p   succeeds ⟺ u active ∧ p = password(u)
    su u     succeeds ⟺ u active ∧ depth > 0 ∧ privilege(top) > privilege(u)
    logout   succeeds ⟺ depth > 0, and restores the previous frame exactly
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from bookstore import Engine, CommandResult

from tests.fake_store import seeded_store


# (user id, password, privilege) created up front by root
ACCOUNTS = [("cust", "cpw", 1), ("clerk", "kpw", 3), ("boss", "bpw", 3)]
PRIVILEGES = {"root": 7, "cust": 1, "clerk": 3, "boss": 3}
PASSWORDS = {"root": "sjtu", "cust": "cpw", "clerk": "kpw", "boss": "bpw"}


def _engine() -> Engine:
    engine = Engine(seeded_store(), verbose=False)
    engine.execute("su root sjtu")
    for user_id, password, privilege in ACCOUNTS:
        engine.execute(f"useradd {user_id} {password} {privilege} {user_id}")
    engine.execute("logout")
    return engine


steps = st.lists(
    st.one_of(
        st.tuples(st.just("su"), st.sampled_from(sorted(PRIVILEGES)), st.sampled_from(["right", "wrong", "none"])),
        st.tuples(st.just("logout"), st.none(), st.none()),
        st.tuples(st.just("select"), st.sampled_from(["X1", "X2"]), st.none()),
    ),
    max_size=30,
)


class TestSessionGatingProperties:

    @given(steps)
    @settings(max_examples=150)
    def test_stack_follows_model(self, script):
        """
        PROPERTY: A reference model of (user, selection) frames predicts the
        engine's stack after every step.
        """
        engine = _engine()
        model = []
        for op, arg, mode in script:
            if op == "su":
                if mode == "right":
                    line = f"su {arg} {PASSWORDS[arg]}"
                    allowed = True
                elif mode == "wrong":
                    line = f"su {arg} nope"
                    allowed = False
                else:
                    line = f"su {arg}"
                    allowed = bool(model) and PRIVILEGES[model[-1][0]] > PRIVILEGES[arg]
                outcome = engine.execute(line)
                assert (outcome.result == CommandResult.APPLIED) == allowed
                if allowed:
                    model.append([arg, ""])
            elif op == "logout":
                outcome = engine.execute("logout")
                assert (outcome.result == CommandResult.APPLIED) == bool(model)
                if model:
                    model.pop()
            else:
                outcome = engine.execute(f"select {arg}")
                allowed = bool(model) and PRIVILEGES[model[-1][0]] >= 3
                assert (outcome.result == CommandResult.APPLIED) == allowed
                if allowed:
                    model[-1][1] = arg

            assert engine.session.depth == len(model)
            assert [f.user_id for f in engine.session.frames] == [m[0] for m in model]
            assert [f.selected_isbn for f in engine.session.frames] == [m[1] for m in model]
            expected_privilege = PRIVILEGES[model[-1][0]] if model else 0
            assert engine.session.privilege == expected_privilege

    @given(st.integers(min_value=1, max_value=8))
    @settings(max_examples=20)
    def test_logout_unwinds_to_empty(self, depth):
        """PROPERTY: depth pushes need exactly depth logouts; one more is refused."""
        engine = _engine()
        for _ in range(depth):
            assert engine.execute("su clerk kpw").result == CommandResult.APPLIED
        for _ in range(depth):
            assert engine.execute("logout").result == CommandResult.APPLIED
        assert engine.execute("logout").result == CommandResult.REJECTED
        assert engine.session.depth == 0
