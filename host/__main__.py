import argparse
import asyncio
import logging

from klondike.models import GameConfig

from .server import HostServer


def main() -> None:
    parser = argparse.ArgumentParser(description="Klondike solitaire host server")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8765)
    parser.add_argument("--seed", type=int, default=None, help="Deal every new connection from this seed")
    parser.add_argument(
        "--replay-step-ms",
        type=int,
        default=140,
        help="Delay between replay frames (milliseconds)",
    )
    parser.add_argument(
        "--no-auto-replay",
        action="store_true",
        help="Do not stream the winning replay automatically after a win",
    )
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper())

    config = GameConfig(
        seed=args.seed,
        replay_step_ms=args.replay_step_ms,
        auto_replay=not args.no_auto_replay,
    )

    server = HostServer(config)
    asyncio.run(server.start(host=args.host, port=args.port))


if __name__ == "__main__":
    main()
