"""
Test configuration for Calx tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from parsing import create_parser
from interpreter import Environment, eval_program


@pytest.fixture(scope="session")
def parser():
  """One grammar for the whole run; parsers hold no per-parse state"""
  return create_parser()


@pytest.fixture
def run(parser):
  """Parse and evaluate source against an environment (empty by default)"""
  def _run(source, env=None):
    return eval_program(env if env is not None else Environment(), parser.parse_string(source))

  return _run
