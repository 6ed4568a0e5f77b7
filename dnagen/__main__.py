"""
Entry point for running dnagen as a module.

Usage:
    python -m dnagen serve [--host H] [--port N] [--debug]
    python -m dnagen generate POOL_SIZE GENE_SIZE [--seed N]
    python -m dnagen decode DNA
    python -m dnagen compare DNA1 DNA2
    python -m dnagen merge DNA1 DNA2 [--no-mutation] [--mutation-rate R] [--seed N]
    python -m dnagen zero DNA POSITION
"""

import argparse
import json
import sys

import numpy as np

from .config import ServiceConfig
from .genome import service
from .log import configure_logging


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='dnagen',
        description='DNA generation service and command line tools'
    )
    parser.add_argument(
        '--log-level', type=str, default=None,
        help='Log level (default: DNAGEN_LOG_LEVEL or INFO)'
    )
    commands = parser.add_subparsers(dest='command', required=True)

    serve = commands.add_parser('serve', help='Run the JSON web API')
    serve.add_argument('--host', type=str, default=None, help='Bind address')
    serve.add_argument('--port', type=int, default=None, help='Port')
    serve.add_argument('--debug', action='store_true', help='Enable Flask debug mode')

    generate = commands.add_parser('generate', help='Generate a random DNA')
    generate.add_argument('pool_size', type=int, help='Number of genes')
    generate.add_argument('gene_size', type=int, help='Bits per gene')
    generate.add_argument('--seed', type=int, default=None, help='Random seed')

    decode = commands.add_parser('decode', help='Decode an encoded DNA')
    decode.add_argument('dna', type=str)

    compare = commands.add_parser('compare', help='Similarity of two encoded DNA')
    compare.add_argument('dna1', type=str)
    compare.add_argument('dna2', type=str)

    merge = commands.add_parser('merge', help='Recombine two encoded DNA')
    merge.add_argument('dna1', type=str)
    merge.add_argument('dna2', type=str)
    merge.add_argument('--no-mutation', action='store_true', help='Skip mutation')
    merge.add_argument('--mutation-rate', type=float, default=None, help='Per-bit flip probability')
    merge.add_argument('--seed', type=int, default=None, help='Random seed')

    zero = commands.add_parser('zero', help='Clear one gene of an encoded DNA')
    zero.add_argument('dna', type=str)
    zero.add_argument('position', type=int)

    return parser.parse_args(argv)


def run_command(args, config):
    """Execute a non-server command and return its JSON payload."""
    if args.command == 'generate':
        rng = np.random.default_rng(args.seed if args.seed is not None else config.seed)
        return service.generate(args.pool_size, args.gene_size, rng=rng).to_dict()
    if args.command == 'decode':
        return service.decode(args.dna).to_dict()
    if args.command == 'compare':
        return {'similarity': service.compare(args.dna1, args.dna2)}
    if args.command == 'merge':
        rng = np.random.default_rng(args.seed if args.seed is not None else config.seed)
        rate = args.mutation_rate if args.mutation_rate is not None else config.mutation_rate
        return service.merge(
            args.dna1, args.dna2,
            allow_mutation=not args.no_mutation,
            rng=rng,
            mutation_rate=rate,
        ).to_dict()
    if args.command == 'zero':
        return service.zero_at(args.dna, args.position).to_dict()
    raise ValueError(f"Unknown command: {args.command}")


def main(argv=None):
    args = parse_args(argv)
    config = ServiceConfig.from_env()
    configure_logging(args.log_level or config.log_level)

    if args.command == 'serve':
        from .web.app import main as serve

        if args.host is not None:
            config.host = args.host
        if args.port is not None:
            config.port = args.port
        if args.debug:
            config.debug = True
        serve(config)
        return 0

    try:
        payload = run_command(args, config)
    except ValueError as e:
        print(json.dumps({'error': str(e)}), file=sys.stderr)
        return 1

    print(json.dumps(payload, indent=2))
    return 0


if __name__ == '__main__':
    sys.exit(main())
