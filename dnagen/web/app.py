"""
Flask web application for the DNA service.

Thin JSON glue over dnagen.genome.service: parses requests, enforces the
size limits, and maps genome errors to 400 responses.
"""

import threading

import numpy as np
from flask import Flask, jsonify, request
from loguru import logger

from ..config import ServiceConfig
from ..genome import service
from ..genome.errors import GenomeError
from ..log import configure_logging


class RequestError(ValueError):
    """A request body or query string is missing or malformed."""


class RequestRandom:
    """
    Hands out an independent generator per request.

    Children are spawned from one SeedSequence, so a seeded app replays the
    same sequence of generators. SeedSequence.spawn is not thread-safe, hence
    the lock.
    """

    def __init__(self, seed=None):
        self.seeds = np.random.SeedSequence(seed)
        self._lock = threading.Lock()

    def next_seed(self) -> np.random.SeedSequence:
        with self._lock:
            return self.seeds.spawn(1)[0]

    def generator(self) -> np.random.Generator:
        return np.random.default_rng(self.next_seed())


def _json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise RequestError('Request body must be a JSON object')
    return data


def _string_field(data, name):
    value = data.get(name)
    if not isinstance(value, str):
        raise RequestError(f'{name} must be a string')
    return value


def _uint_field(data, name):
    value = data.get(name)
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise RequestError(f'{name} must be a non-negative integer')
    return value


def _uint_arg(name):
    value = request.args.get(name, type=int)
    if value is None or value < 0:
        raise RequestError(f'{name} must be a non-negative integer')
    return value


def create_app(config=None):
    """Create and configure the Flask application."""
    if config is None:
        config = ServiceConfig.from_env()

    app = Flask(__name__)
    app.config['DNAGEN'] = config

    random_source = RequestRandom(config.seed)
    app.config['DNAGEN_RANDOM'] = random_source

    @app.errorhandler(GenomeError)
    def handle_genome_error(error):
        logger.info("Rejected {} {}: {}", request.method, request.path, error)
        return jsonify({'error': str(error)}), 400

    @app.errorhandler(RequestError)
    def handle_request_error(error):
        logger.info("Bad request {} {}: {}", request.method, request.path, error)
        return jsonify({'error': str(error)}), 400

    @app.route('/')
    def index():
        """Service description."""
        return jsonify({
            'description': 'DNA generation service',
            'status': 'ok',
        })

    @app.route('/dna')
    def get_dna():
        """Generate a random DNA."""
        pool_size = _uint_arg('pool_size')
        gene_size = _uint_arg('gene_size')
        if pool_size > config.max_pool_size:
            return jsonify({'error': f'pool_size is over: {config.max_pool_size}'}), 400
        if gene_size > config.max_gene_size:
            return jsonify({'error': f'gene_size is over: {config.max_gene_size}'}), 400

        dna = service.generate(pool_size, gene_size, rng=random_source.generator())
        return jsonify(dna.to_dict())

    @app.route('/decode', methods=['POST'])
    def decode_dna():
        """Decode an encoded DNA."""
        data = _json_body()
        dna = service.decode(_string_field(data, 'dna'))
        return jsonify(dna.to_dict())

    @app.route('/compare', methods=['POST'])
    def compare_dna():
        """Similarity between two encoded DNA."""
        data = _json_body()
        similarity = service.compare(
            _string_field(data, 'dna1'),
            _string_field(data, 'dna2'),
        )
        return jsonify({'similarity': similarity})

    @app.route('/merge', methods=['POST'])
    def merge_dna():
        """Recombine two encoded DNA."""
        data = _json_body()
        allow_mutation = data.get('allow_mutation', config.allow_mutation)
        if not isinstance(allow_mutation, bool):
            raise RequestError('allow_mutation must be a boolean')

        dna = service.merge(
            _string_field(data, 'dna1'),
            _string_field(data, 'dna2'),
            allow_mutation=allow_mutation,
            rng=random_source.generator(),
            mutation_rate=config.mutation_rate,
        )
        return jsonify(dna.to_dict())

    @app.route('/zero', methods=['POST'])
    def zero_dna():
        """Clear one gene of an encoded DNA."""
        data = _json_body()
        dna = service.zero_at(
            _string_field(data, 'dna'),
            _uint_field(data, 'position'),
        )
        return jsonify(dna.to_dict())

    return app


def main(config=None):
    """Run the Flask development server."""
    if config is None:
        config = ServiceConfig.from_env()
    configure_logging(config.log_level)
    app = create_app(config)
    logger.info("Starting DNA service at http://{}:{}", config.host, config.port)
    app.run(host=config.host, port=config.port, debug=config.debug)


if __name__ == '__main__':
    main()
