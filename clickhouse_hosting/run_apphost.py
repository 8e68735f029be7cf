# clickhouse_hosting/run_apphost.py
"""
Run a ClickHouse app host against an already running server (development).

    docker run -d -p 8123:8123 -e CLICKHOUSE_PASSWORD=secret clickhouse/clickhouse-server
    python -m clickhouse_hosting.run_apphost --port 8123 --password secret --database analytics
"""

import argparse
import asyncio
import json
import logging
import sys

from clickhouse_hosting.application import DistributedApplicationBuilder
from clickhouse_hosting.extensions import add_clickhouse, add_database
from clickhouse_hosting.domain.models import ResourceWithConnectionString
from clickhouse_hosting.manifest import get_application_manifest

logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="ClickHouse app host (development)")
    parser.add_argument("--name", default="clickhouse")
    parser.add_argument("--host", default="localhost")
    parser.add_argument("--port", type=int, default=8123)
    parser.add_argument("--password", default=None)
    parser.add_argument("--database", action="append", default=[])
    parser.add_argument("--manifest", action="store_true", help="Print the manifest and exit")
    return parser.parse_args(argv)


async def run(args) -> None:
    builder = DistributedApplicationBuilder("apphost")

    password = None
    if args.password is not None:
        password = builder.add_parameter(f"{args.name}-password", args.password, secret=True)

    clickhouse = add_clickhouse(builder, args.name, port=args.port, password=password)
    for database in args.database:
        add_database(clickhouse, database)

    if args.manifest:
        print(json.dumps(get_application_manifest(builder.resources), indent=2))
        return

    app = builder.build()
    app.allocate_endpoint(clickhouse.resource, "http", args.host)

    await app.start()

    for resource in app.resources:
        if isinstance(resource, ResourceWithConnectionString):
            connection_string = await resource.get_connection_string(app.context)
            logger.info(f"[{resource.name}] {connection_string}")


def main():
    """Main entry point."""
    args = parse_args()
    logger.info("Starting ClickHouse app host (Development Mode)")

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
