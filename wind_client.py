#!/usr/bin/env python3
"""Query a running wind_webserver from the command line."""
import argparse
import sys

import requests

from wind_config import HTTP_PORT
from wind_measurement import Measurement

TIMEOUT = 10


def fetch(host, port, cmd, params=None):
    response = requests.get(f"http://{host}:{port}/wind/{cmd}", params=params, timeout=TIMEOUT)
    response.raise_for_status()
    return response.json()


def main(argv=None):
    parser = argparse.ArgumentParser(prog="wind_client.py", description="Query the wind server.")
    parser.add_argument('--host', type=str, default='127.0.0.1')
    parser.add_argument('--port', type=int, default=HTTP_PORT)
    sub = parser.add_subparsers(dest='command', required=True)
    sub.add_parser('current', help="Latest measurement, if recent.")
    sub.add_parser('oldest', help="Oldest stored measurement.")
    sub.add_parser('last', help="Latest stored measurement.")
    history = sub.add_parser('history', help="Averaged measurements over a time range.")
    history.add_argument('--duration', type=float, default=3600, help="Seconds to look back (default: 3600).")
    history.add_argument('--interval', type=float, default=60, help="Bucket width in seconds (default: 60).")
    args = parser.parse_args(argv)

    endpoints = {'current': 'current', 'oldest': 'oldest_data', 'last': 'last_data'}
    try:
        if args.command == 'history':
            data = fetch(args.host, args.port, 'data_since',
                         {'duration': args.duration, 'interval': args.interval})
            for item in data:
                print(Measurement.from_dict(item).pretty_str())
        else:
            data = fetch(args.host, args.port, endpoints[args.command])
            print(Measurement.from_dict(data).pretty_str())
    except requests.RequestException as e:
        print(f"Error querying wind server: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
