from __future__ import annotations

import argparse
import time

from domain.errors import AgentError
from shared.config.loader import load_agent_settings

from apps.agent.compose import build_agent, configure_logging


def fibonacci(n: int) -> int:
    return 1 if n < 2 else fibonacci(n - 1) + fibonacci(n - 2)


def main() -> int:
    ap = argparse.ArgumentParser(prog="pyroscope-agent")
    ap.add_argument("--profile", default=None, help="Config profile under configs/profiles/.")
    ap.add_argument("--duration", type=float, default=25.0, help="Seconds of demo workload.")
    ap.add_argument("--fib", type=int, default=25, help="Fibonacci argument per work unit.")
    ap.add_argument("--quiet", action="store_true", help="Reduce console output.")
    args = ap.parse_args()

    settings = load_agent_settings(profile=args.profile)
    configure_logging(settings, quiet=args.quiet)
    agent = build_agent(settings)

    if not args.quiet:
        print(
            f"[agent] server={settings.server_address} "
            f"app={settings.application_name} "
            f"rate={settings.sample_rate}Hz tags={settings.tags}"
        )

    agent.start()
    units = 0
    deadline = time.monotonic() + max(args.duration, 0.0)
    try:
        while time.monotonic() < deadline:
            fibonacci(args.fib)
            units += 1
    except KeyboardInterrupt:
        if not args.quiet:
            print("\n[agent] interrupted, flushing...")

    try:
        agent.stop()
    except AgentError as ex:
        print(f"[agent] final upload failed: {ex}")
        return 1
    if not args.quiet:
        print(f"[agent] done, {units} work units profiled")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
