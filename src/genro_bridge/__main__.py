# Copyright 2025 Softwell S.r.l.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     https://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
genro-bridge CLI entry point.

Usage:
    genro-bridge serve myapp.api:handler              # Serve a handler
    genro-bridge serve myapp.api:handler --port 9000  # Override port
"""

from __future__ import annotations

import logging
import sys


def cmd_serve(argv: list[str]) -> int:
    """Run the bridge server."""
    from .server import BridgeServer

    # Create server - passes argv for SmartOptions parsing
    try:
        server = BridgeServer(argv=argv)
    except (ImportError, AttributeError, TypeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=server.config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("genro-bridge starting...", flush=True)
    print(f"Handler: {server.config.handler}", flush=True)
    print(f"Server: http://{server.config.host}:{server.config.port}", flush=True)
    print(flush=True)

    try:
        server.run()
    except KeyboardInterrupt:
        print("\nShutdown.")

    return 0


def main() -> int:
    """Main entry point."""
    if "--version" in sys.argv or "-v" in sys.argv:
        from . import __version__

        print(f"genro-bridge {__version__}")
        return 0

    if "--help" in sys.argv or "-h" in sys.argv or len(sys.argv) == 1:
        print("Usage: genro-bridge serve <module:handler> [options]")
        print()
        print("Arguments:")
        print("  module:handler    Import path of the handler callable")
        print()
        print("Options:")
        print("  --host HOST       Server host (default: 127.0.0.1)")
        print("  --port PORT       Server port (default: 8000)")
        print("  --log_level LVL   Log level (default: INFO)")
        print("  --exit_code N     Exit code on fatal errors (default: 1)")
        print("  --version, -v     Show version")
        print("  --help, -h        Show this help")
        return 0

    subcommand = sys.argv[1]
    if subcommand != "serve":
        print(f"Error: unknown subcommand '{subcommand}'", file=sys.stderr)
        return 1

    return cmd_serve(sys.argv[2:])


if __name__ == "__main__":
    sys.exit(main())
