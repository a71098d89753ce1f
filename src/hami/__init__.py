"""
hami - embeddable workflow runtime.

- hami.core: nodes, flows, schema validation and the registration manager
- hami.plugins: leaf operation nodes bundled as plugins (core, fs, config, trace)
- hami.cli: the ``hami`` command line built on those plugins
"""

__version__ = "0.1.0"

from hami.core import *  # noqa
