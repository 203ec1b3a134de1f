"""YAML utilities for configuration processing.

Mappings are loaded as ordered, case-insensitive dictionaries, so that
`Scope` and `scope` name the same section and column order is kept.
"""

import yaml
from pydicti import odicti


def ordered_load(stream, loader=yaml.SafeLoader, object_pairs_hook=odicti):
    """
    Load YAML mappings as ordered dictionaries.
    """

    def construct_mapping(loader, node, _deep=False):
        loader.flatten_mapping(node)
        return object_pairs_hook(loader.construct_pairs(node))

    # Subclass with its own constructor table so `loader` is left untouched
    OrderedLoader = type(
        "OrderedLoader",
        (loader,),
        {"yaml_constructors": dict(loader.yaml_constructors)},
    )
    OrderedLoader.add_constructor(
        yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, construct_mapping
    )

    return yaml.load(stream, OrderedLoader)
