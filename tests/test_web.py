"""
Tests for the JSON web API, configuration and command line.

Run with: python -m pytest tests/test_web.py -v
"""

import json
import pytest
import sys
import threading
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dnagen.__main__ import main as cli_main
from dnagen.config import ServiceConfig
from dnagen.genome.codec import is_valid
from dnagen.web.app import RequestRandom, create_app


@pytest.fixture
def client():
    """Test client for a seeded app."""
    app = create_app(ServiceConfig(seed=1234))
    app.config['TESTING'] = True
    return app.test_client()


class TestIndex:
    def test_index(self, client):
        response = client.get('/')
        assert response.status_code == 200
        assert response.get_json() == {
            'description': 'DNA generation service',
            'status': 'ok',
        }


class TestGenerate:
    """Tests for GET /dna."""

    def test_generate(self, client):
        response = client.get('/dna?pool_size=4&gene_size=8')
        assert response.status_code == 200
        data = response.get_json()
        assert data['pool_size'] == 4
        assert data['gene_size'] == 8
        assert data['raw_size'] == 4
        assert len(data['raw_value']) == 4
        assert is_valid(data['dna_str'])
        assert data['dna_str'].startswith('4x8:')

    def test_upper_bound_accepted(self, client):
        response = client.get('/dna?pool_size=512&gene_size=512')
        assert response.status_code == 200
        assert response.get_json()['raw_size'] == 512

    def test_pool_size_over_limit(self, client):
        response = client.get('/dna?pool_size=513&gene_size=8')
        assert response.status_code == 400
        assert response.get_json() == {'error': 'pool_size is over: 512'}

    def test_gene_size_over_limit(self, client):
        response = client.get('/dna?pool_size=4&gene_size=600')
        assert response.status_code == 400
        assert response.get_json() == {'error': 'gene_size is over: 512'}

    @pytest.mark.parametrize('query', [
        '',
        '?pool_size=4',
        '?pool_size=abc&gene_size=8',
        '?pool_size=-1&gene_size=8',
    ])
    def test_bad_query(self, client, query):
        response = client.get('/dna' + query)
        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_seeded_apps_agree(self):
        """Same seed gives the same sequence of generated DNA."""
        results = []
        for _ in range(2):
            app_client = create_app(ServiceConfig(seed=99)).test_client()
            first = app_client.get('/dna?pool_size=3&gene_size=16').get_json()
            second = app_client.get('/dna?pool_size=3&gene_size=16').get_json()
            results.append((first['dna_str'], second['dna_str']))
        assert results[0] == results[1]
        assert results[0][0] != results[0][1]

    def test_configured_limit(self):
        app_client = create_app(ServiceConfig(max_pool_size=16)).test_client()
        response = app_client.get('/dna?pool_size=17&gene_size=8')
        assert response.status_code == 400
        assert response.get_json() == {'error': 'pool_size is over: 16'}


class TestRequestRandom:
    """Tests for per-request generators."""

    def test_concurrent_spawn_keys_are_unique(self):
        """Generators handed out from many threads never share a seed."""
        random_source = RequestRandom(seed=5)
        keys = []
        keys_lock = threading.Lock()
        start = threading.Barrier(8)

        def worker():
            start.wait()
            local = [random_source.next_seed().spawn_key for _ in range(200)]
            with keys_lock:
                keys.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(keys) == 1600
        assert len(set(keys)) == 1600

    def test_seeded_sequence_replays(self):
        first = RequestRandom(seed=11)
        second = RequestRandom(seed=11)
        for _ in range(3):
            assert first.generator().integers(0, 1 << 30) == \
                second.generator().integers(0, 1 << 30)

    def test_app_uses_shared_source(self):
        app = create_app(ServiceConfig(seed=1))
        random_source = app.config['DNAGEN_RANDOM']
        assert isinstance(random_source, RequestRandom)
        app.test_client().get('/dna?pool_size=2&gene_size=4')
        assert random_source.seeds.n_children_spawned == 1


class TestDecode:
    """Tests for POST /decode."""

    def test_decode(self, client):
        response = client.post('/decode', json={'dna': '2x4:f-0'})
        assert response.status_code == 200
        assert response.get_json() == {
            'pool_size': 2,
            'gene_size': 4,
            'dna_str': '2x4:f-0',
            'raw_value': [1.0, 0.0],
            'raw_size': 2,
        }

    def test_decode_invalid(self, client):
        response = client.post('/decode', json={'dna': '2x4:f'})
        assert response.status_code == 400
        assert response.get_json()['error'].startswith('DNA string not valid')

    def test_decode_empty_pool_with_huge_gene_size(self, client):
        response = client.post('/decode', json={'dna': '0x9999999999:'})
        assert response.status_code == 200
        data = response.get_json()
        assert data['raw_value'] == []
        assert data['raw_size'] == 0
        assert data['gene_size'] == 9999999999

    def test_missing_field(self, client):
        response = client.post('/decode', json={})
        assert response.status_code == 400
        assert response.get_json() == {'error': 'dna must be a string'}

    def test_non_json_body(self, client):
        response = client.post('/decode', data='2x4:f-0', content_type='text/plain')
        assert response.status_code == 400
        assert response.get_json() == {'error': 'Request body must be a JSON object'}


class TestCompare:
    """Tests for POST /compare."""

    def test_compare_identical(self, client):
        response = client.post('/compare', json={'dna1': '2x4:f-a', 'dna2': '2x4:f-a'})
        assert response.status_code == 200
        assert response.get_json() == {'similarity': 1.0}

    def test_compare_half(self, client):
        response = client.post('/compare', json={'dna1': '1x4:c', 'dna2': '1x4:f'})
        assert response.get_json()['similarity'] == pytest.approx(0.5)

    def test_compare_invalid(self, client):
        response = client.post('/compare', json={'dna1': '2x4:f-a', 'dna2': 'bogus'})
        assert response.status_code == 400
        assert response.get_json() == {'error': 'DNA string not valid'}

    def test_compare_shape_mismatch(self, client):
        response = client.post('/compare', json={'dna1': '1x4:f', 'dna2': '2x4:f-f'})
        assert response.status_code == 400
        assert 'shapes differ' in response.get_json()['error']


class TestMerge:
    """Tests for POST /merge."""

    def test_merge_without_mutation(self, client):
        response = client.post('/merge', json={
            'dna1': '3x4:f-a-5',
            'dna2': '3x4:f-a-5',
            'allow_mutation': False,
        })
        assert response.status_code == 200
        data = response.get_json()
        assert data['dna_str'] == '3x4:f-a-5'
        assert data['raw_size'] == 3

    def test_merge_with_mutation(self, client):
        response = client.post('/merge', json={'dna1': '3x4:f-a-5', 'dna2': '3x4:0-1-2'})
        assert response.status_code == 200
        data = response.get_json()
        assert data['pool_size'] == 3
        assert data['gene_size'] == 4
        assert is_valid(data['dna_str'])

    def test_merge_shape_mismatch(self, client):
        """pool_size 3 vs pool_size 5."""
        response = client.post('/merge', json={
            'dna1': '3x4:f-a-5',
            'dna2': '5x4:f-a-5-0-0',
        })
        assert response.status_code == 400
        assert 'shapes differ' in response.get_json()['error']

    def test_merge_invalid(self, client):
        response = client.post('/merge', json={'dna1': '', 'dna2': '1x4:f'})
        assert response.status_code == 400
        assert response.get_json() == {'error': 'DNA string not valid'}

    def test_merge_bad_flag(self, client):
        response = client.post('/merge', json={
            'dna1': '1x4:f', 'dna2': '1x4:f', 'allow_mutation': 'yes',
        })
        assert response.status_code == 400


class TestZero:
    """Tests for POST /zero."""

    def test_zero(self, client):
        response = client.post('/zero', json={'dna': '3x4:f-a-5', 'position': 1})
        assert response.status_code == 200
        data = response.get_json()
        assert data['dna_str'] == '3x4:f-0-5'
        assert data['raw_value'][1] == 0.0

    def test_zero_out_of_range(self, client):
        response = client.post('/zero', json={'dna': '5x4:f-a-5-0-0', 'position': 10})
        assert response.status_code == 400
        assert response.get_json()['error'].startswith('Invalid position')

    def test_zero_invalid_dna(self, client):
        response = client.post('/zero', json={'dna': 'nope', 'position': 0})
        assert response.status_code == 400

    @pytest.mark.parametrize('position', [-1, 'one', True, None, 1.5])
    def test_zero_bad_position(self, client, position):
        response = client.post('/zero', json={'dna': '3x4:f-a-5', 'position': position})
        assert response.status_code == 400
        assert response.get_json() == {'error': 'position must be a non-negative integer'}


class TestConfig:
    """Tests for ServiceConfig."""

    def test_defaults(self):
        config = ServiceConfig()
        assert config.max_pool_size == 512
        assert config.max_gene_size == 512
        assert config.allow_mutation is True
        assert config.seed is None

    def test_from_env(self):
        config = ServiceConfig.from_env({
            'DNAGEN_MAX_POOL_SIZE': '256',
            'DNAGEN_DEBUG': 'true',
            'DNAGEN_SEED': '7',
            'DNAGEN_MUTATION_RATE': '0.5',
            'DNAGEN_HOST': '0.0.0.0',
            'DNAGEN_ALLOW_MUTATION': 'off',
        })
        assert config.max_pool_size == 256
        assert config.debug is True
        assert config.seed == 7
        assert config.mutation_rate == 0.5
        assert config.host == '0.0.0.0'
        assert config.allow_mutation is False
        assert config.max_gene_size == 512

    def test_from_env_invalid(self):
        with pytest.raises(ValueError):
            ServiceConfig.from_env({'DNAGEN_PORT': 'eighty'})
        with pytest.raises(ValueError):
            ServiceConfig.from_env({'DNAGEN_DEBUG': 'maybe'})

    def test_invalid_mutation_rate(self):
        with pytest.raises(ValueError):
            ServiceConfig(mutation_rate=2.0)

    def test_to_dict(self):
        d = ServiceConfig(seed=3).to_dict()
        assert d['seed'] == 3
        assert d['port'] == 8000

    def test_app_disables_mutation_by_config(self):
        app_client = create_app(ServiceConfig(allow_mutation=False, mutation_rate=1.0)).test_client()
        response = app_client.post('/merge', json={'dna1': '1x4:f', 'dna2': '1x4:f'})
        assert response.get_json()['dna_str'] == '1x4:f'


class TestCommandLine:
    """Tests for python -m dnagen."""

    def test_decode(self, capsys):
        assert cli_main(['decode', '2x4:f-0']) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload['dna_str'] == '2x4:f-0'

    def test_generate_seeded(self, capsys):
        assert cli_main(['generate', '3', '8', '--seed', '5']) == 0
        first = json.loads(capsys.readouterr().out)
        assert cli_main(['generate', '3', '8', '--seed', '5']) == 0
        second = json.loads(capsys.readouterr().out)
        assert first == second
        assert first['raw_size'] == 3

    def test_compare(self, capsys):
        assert cli_main(['compare', '1x4:f', '1x4:0']) == 0
        assert json.loads(capsys.readouterr().out) == {'similarity': 0.0}

    def test_merge_no_mutation(self, capsys):
        assert cli_main(['merge', '1x4:f', '1x4:f', '--no-mutation']) == 0
        assert json.loads(capsys.readouterr().out)['dna_str'] == '1x4:f'

    def test_zero(self, capsys):
        assert cli_main(['zero', '2x4:f-a', '0']) == 0
        assert json.loads(capsys.readouterr().out)['dna_str'] == '2x4:0-a'

    def test_serve_honours_port_zero(self, monkeypatch):
        """An explicit --port 0 is passed through, not replaced by the default."""
        started = []
        monkeypatch.setattr('dnagen.web.app.main', started.append)
        assert cli_main(['serve', '--port', '0', '--host', '0.0.0.0']) == 0
        assert started[0].port == 0
        assert started[0].host == '0.0.0.0'
        assert started[0].debug is False

    def test_error_exit_code(self, capsys):
        assert cli_main(['zero', '2x4:f-a', '5']) == 1
        assert 'Invalid position' in capsys.readouterr().err
