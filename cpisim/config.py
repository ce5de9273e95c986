"""Machine and simulation configuration."""
import copy
import logging

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from cpisim.cache import (ConfigurationError, L1_SIZE, L1_ASSOCIATIVITY, L1_HIT_LATENCY,
                          L2_SIZE, L2_LINE_SIZE, L2_ASSOCIATIVITY, L2_HIT_LATENCY,
                          DRAM_SIZE, DRAM_PENALTY)

log = logging.getLogger(__name__)

ITERATIONS = 10000
MEMORY_PROBABILITY = 0.35
WRITE_PROBABILITY = 0.5
LINE_SIZES = [16, 32, 64, 128]

DEFAULT_CONFIG = {
    'L1': {'size': L1_SIZE,
           'associativity': L1_ASSOCIATIVITY,
           'hit_latency': L1_HIT_LATENCY},
    'L2': {'size': L2_SIZE,
           'line_size': L2_LINE_SIZE,
           'associativity': L2_ASSOCIATIVITY,
           'hit_latency': L2_HIT_LATENCY},
    'DRAM': {'size': DRAM_SIZE,
             'penalty': DRAM_PENALTY},
    'simulation': {'iterations': ITERATIONS,
                   'memory_probability': MEMORY_PROBABILITY,
                   'write_probability': WRITE_PROBABILITY,
                   'line_sizes': LINE_SIZES},
}


def merge_config(base, update):
    """
    Return a copy of *base* with the sections of *update* merged in.

    Only sections and keys already present in *base* are accepted, anything
    else raises ConfigurationError.
    """
    merged = copy.deepcopy(base)
    if update is None:
        return merged
    if not isinstance(update, dict):
        raise ConfigurationError("configuration must be a mapping of sections, got {!r}".format(
            type(update).__name__))
    for section, values in update.items():
        if section not in merged:
            raise ConfigurationError("unknown configuration section {!r}, expected one of: {}".format(
                section, ', '.join(sorted(merged))))
        if not isinstance(values, dict):
            raise ConfigurationError("section {!r} must be a mapping".format(section))
        for key, value in values.items():
            if key not in merged[section]:
                raise ConfigurationError("unknown key {!r} in section {!r}, expected one of: {}".format(
                    key, section, ', '.join(sorted(merged[section]))))
            merged[section][key] = value
    check_simulation(merged['simulation'])
    return merged


def check_simulation(sim):
    """Validate the simulation section."""
    if not is_int(sim['iterations']) or sim['iterations'] <= 0:
        raise ConfigurationError("iterations must be a positive integer, got {!r}".format(
            sim['iterations']))
    for key in ['memory_probability', 'write_probability']:
        value = sim[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
            raise ConfigurationError("{} must be a number within [0, 1], got {!r}".format(
                key, value))
    line_sizes = sim['line_sizes']
    if (not isinstance(line_sizes, list) or not line_sizes
            or not all(is_int(l) and l > 0 for l in line_sizes)):
        raise ConfigurationError("line_sizes must be a non-empty list of positive integers, "
                                 "got {!r}".format(line_sizes))


def is_int(value):
    """Return True if value is an int, but not a bool."""
    return isinstance(value, int) and not isinstance(value, bool)


def load_config(path=None):
    """
    Load YAML configuration file and merge it onto the defaults.

    :param path: file name, if None the defaults are returned
    """
    if path is None:
        return copy.deepcopy(DEFAULT_CONFIG)
    yaml = YAML(typ='safe')
    try:
        with open(path) as f:
            data = yaml.load(f)
    except (IOError, OSError) as e:
        raise ConfigurationError("unable to read configuration {}: {}".format(path, e))
    except YAMLError as e:
        raise ConfigurationError("malformed configuration {}: {}".format(path, e))
    log.info("loaded configuration from %s", path)
    return merge_config(DEFAULT_CONFIG, data)
