import copy
import json

import pytest

from child_weight.commands import options_from_config, run_simulate
from child_weight.reference import ReferenceValueSet
from child_weight.settings import DEFAULT_CONFIG_PATH, read_config, validate_config


@pytest.fixture
def config() -> dict:
    return read_config()


def test_repo_config_is_valid(config):
    assert config['intake']['mode'] in ('logistic', 'table')


def test_missing_key_names_dotted_path(config):
    cfg = copy.deepcopy(config)
    del cfg['simulation']['dt_days']
    with pytest.raises(KeyError, match='simulation.dt_days'):
        validate_config(cfg)


def test_rejects_bad_values(config):
    cfg = copy.deepcopy(config)
    cfg['simulation']['dt_days'] = 0
    with pytest.raises(ValueError):
        validate_config(cfg)

    cfg = copy.deepcopy(config)
    cfg['intake']['mode'] = 'buffet'
    with pytest.raises(ValueError, match='intake.mode'):
        validate_config(cfg)

    cfg = copy.deepcopy(config)
    cfg['simulation']['check'] = 'yes'
    with pytest.raises(ValueError):
        validate_config(cfg)

    cfg = copy.deepcopy(config)
    cfg['intake']['mode'] = 'logistic'
    del cfg['intake']['logistic']['nu']
    with pytest.raises(KeyError, match='intake.logistic.nu'):
        validate_config(cfg)


def test_read_config_from_path(tmp_path, config):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps(config), encoding='utf-8')
    assert read_config(path) == config
    assert DEFAULT_CONFIG_PATH.exists()


def test_overrides_win(config, tmp_path):
    opts = options_from_config(config, days=12, dt_days=0.5, reference_values='median', output_dir=str(tmp_path))
    assert opts.days == 12.0
    assert opts.dt_days == 0.5
    assert opts.reference_values is ReferenceValueSet.MEDIAN
    assert opts.output_dir == tmp_path

    table_opts = options_from_config(config, intake_table_csv='data/intake_example.csv')
    assert table_opts.intake_mode == 'table'
    assert table_opts.logistic is None


def test_run_simulate_logistic(config, tmp_path):
    opts = options_from_config(config, days=30, output_dir=str(tmp_path), plot=True)
    lines = []
    result = run_simulate(opts, echo=lines.append)
    assert result.correct_values
    assert result.body_weight.shape[1] == 31
    assert (tmp_path / 'trajectories.csv').exists()
    assert (tmp_path / 'summary.json').exists()
    assert (tmp_path / 'trajectories.png').exists()
    assert any('Cohort:' in line for line in lines)


def test_run_simulate_table(config, tmp_path):
    opts = options_from_config(
        config, intake_table_csv='data/intake_example.csv', days=30, output_dir=str(tmp_path), plot=False
    )
    result = run_simulate(opts, echo=lambda s: None)
    assert result.meta['intake_mode'] == 'table'
    assert not (tmp_path / 'trajectories.png').exists()
