# log_utils.py -- Logging utilities for gitlet
# Copyright (C) 2026 The Gitlet Authors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# Gitlet is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Logging utilities for gitlet.

gitlet is usable as a library, and library users may not want any logging
output. A null handler is attached to the ``gitlet`` logger at import time so
that nothing is emitted until the application configures logging, either
itself or through default_logging_config().

Tracing can be turned on with the GITLET_TRACE environment variable:

- ``1``, ``2`` or ``true`` traces to stderr
- an absolute file path appends to that file
- an existing directory gets one ``trace.<pid>`` file per process
"""

__all__ = [
    "configure_logging_from_trace",
    "default_logging_config",
    "getLogger",
    "remove_null_handler",
]

import logging
import os
import sys
from collections.abc import Mapping

getLogger = logging.getLogger

TRACE_ENV = "GITLET_TRACE"
TRACE_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"


class _NullHandler(logging.Handler):
    """No-op logging handler to avoid unexpected logging warnings."""

    def emit(self, record: logging.LogRecord) -> None:
        pass


_NULL_HANDLER = _NullHandler()
_GITLET_LOGGER = getLogger("gitlet")
_GITLET_LOGGER.addHandler(_NULL_HANDLER)


def _get_trace_target(env: Mapping[str, str] | None = None) -> str | int | None:
    """Get the trace target from the GITLET_TRACE environment variable.

    Returns:
        - None if tracing is disabled
        - 2 for stderr output (values "1", "2", "true")
        - str for a file path or directory (absolute paths only)
    """
    if env is None:
        env = os.environ
    trace_value = env.get(TRACE_ENV, "")

    if not trace_value or trace_value.lower() in ("0", "false"):
        return None

    if trace_value.lower() in ("1", "2", "true"):
        return 2

    if os.path.isabs(trace_value):
        return trace_value

    return None


def configure_logging_from_trace(env: Mapping[str, str] | None = None) -> bool:
    """Configure logging based on the GITLET_TRACE environment variable.

    Returns True if trace configuration was successful, False otherwise.
    """
    trace_target = _get_trace_target(env)
    if trace_target is None:
        return False

    remove_null_handler()
    if trace_target == 2:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format=TRACE_FORMAT)
        return True

    assert isinstance(trace_target, str)
    if os.path.isdir(trace_target):
        filename = os.path.join(trace_target, f"trace.{os.getpid()}")
    else:
        filename = trace_target
    try:
        logging.basicConfig(
            level=logging.DEBUG, filename=filename, filemode="a", format=TRACE_FORMAT
        )
    except OSError as e:
        sys.stderr.write(f"Warning: Failed to open {TRACE_ENV} file {filename}: {e}\n")
        return False
    return True


def default_logging_config() -> None:
    """Set up the default gitlet loggers.

    Respects GITLET_TRACE; without it, warnings and above go to stderr.
    """
    remove_null_handler()

    if not configure_logging_from_trace():
        logging.basicConfig(
            level=logging.WARNING,
            stream=sys.stderr,
            format="%(levelname)s: %(message)s",
        )


def remove_null_handler() -> None:
    """Remove the null handler from the gitlet loggers.

    If a caller wants to set up logging using something other than
    default_logging_config, calling this function first is a minor optimization
    to avoid the overhead of using the _NullHandler.
    """
    _GITLET_LOGGER.removeHandler(_NULL_HANDLER)
