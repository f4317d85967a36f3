"""
Environment tests for Calx
Persistent bindings: lookup, shadowing and snapshot independence
"""

from interpreter import Environment
from values import Number, String


class TestEnvironment:
  """Test the immutable environment"""

  def test_empty_environment(self):
    env = Environment()
    assert env.lookup("x") is None
    assert "x" not in env
    assert len(env) == 0
    assert env.names() == []
    assert env.bindings() == {}

  def test_with_variable_and_lookup(self):
    env = Environment().with_variable("x", Number(1.0))
    assert env.lookup("x") == Number(1.0)
    assert "x" in env

  def test_nearest_binding_wins(self):
    env = Environment().with_variable("x", Number(1.0)).with_variable("x", Number(2.0))
    assert env.lookup("x") == Number(2.0)
    assert len(env) == 1

  def test_extension_leaves_original_unchanged(self):
    base = Environment().with_variable("x", Number(1.0))
    extended = base.with_variable("x", Number(2.0)).with_variable("y", String("s"))
    assert base.lookup("x") == Number(1.0)
    assert base.lookup("y") is None
    assert extended.lookup("x") == Number(2.0)
    assert extended.lookup("y") == String("s")

  def test_siblings_are_independent(self):
    base = Environment().with_variable("a", Number(1.0))
    left = base.with_variable("b", Number(2.0))
    right = base.with_variable("c", Number(3.0))
    assert "c" not in left
    assert "b" not in right
    assert left.lookup("a") == right.lookup("a") == Number(1.0)

  def test_names_most_recent_first(self):
    env = (Environment()
           .with_variable("a", Number(1.0))
           .with_variable("b", Number(2.0))
           .with_variable("a", Number(3.0)))
    assert env.names() == ["a", "b"]

  def test_bindings_in_definition_order(self):
    env = (Environment()
           .with_variable("a", Number(1.0))
           .with_variable("b", Number(2.0))
           .with_variable("a", Number(3.0)))
    assert list(env.bindings().items()) == [("b", Number(2.0)), ("a", Number(3.0))]

  def test_long_chain(self):
    env = Environment()
    for i in range(5000):
      env = env.with_variable(f"v{i}", Number(float(i)))
    assert env.lookup("v0") == Number(0.0)
    assert env.lookup("v4999") == Number(4999.0)

  def test_repr(self):
    env = Environment().with_variable("x", Number(1.0))
    assert repr(env) == "Environment(x=Number(value=1.0))"
