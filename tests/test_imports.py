import os
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent


@pytest.mark.parametrize(
    "module",
    ["iep.exceptions", "iep.utils.tenant_context", "iep.client", "iep.main"],
)
def test_module_imports_in_fresh_interpreter(module):
    # A fresh interpreter makes this module the first one loaded
    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        capture_output=True,
        text=True,
        cwd=ROOT,
        env=os.environ.copy(),
        timeout=60,
    )

    assert result.returncode == 0, result.stderr
