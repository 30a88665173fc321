"""
Each entry module must import on its own in a fresh interpreter.
"""

import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]


@pytest.mark.parametrize(
    "module",
    [
        "application.routes.guard",
        "application.routes",
        "application.services",
        "application.services.portal_service",
        "application.services.chat.admin_channel",
        "application.views.base",
        "application.views",
    ],
)
def test_module_imports_in_fresh_interpreter(module):
    result = subprocess.run(
        [sys.executable, "-c", f"import {module}"],
        cwd=ROOT,
        capture_output=True,
        text=True,
    )

    assert result.returncode == 0, result.stderr
