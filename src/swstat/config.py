""" Client configuration. Defaults live here; a JSON file in the
    configuration :func:`directory` may override any of them, and the
    command line may override the file.
"""

import os

from . import json
from .protocol import fields


filename = 'client.json'

defaults = dict()
defaults['port'] = fields.default_port
defaults['interval'] = 3.0
defaults['timeout'] = 10.0
defaults['maximum'] = fields.maximum_size

types = dict()
types['port'] = int
types['interval'] = float
types['timeout'] = float
types['maximum'] = int


class Configuration:
    """ A dictionary-like view of the client settings. Unknown keys are
        rejected; values are coerced to the type of the default, and a
        value that cannot be coerced raises ValueError naming the key.
    """

    def __init__(self, overrides=None):

        self._values = dict(defaults)

        if overrides is not None:
            self.update(overrides)


    def __contains__(self, key):
        return key in self._values


    def __getitem__(self, key):
        return self._values[key]


    def __getattr__(self, key):
        try:
            return self.__dict__['_values'][key]
        except KeyError:
            raise AttributeError(key)


    def __repr__(self):
        return 'Configuration(%r)' % (self._values,)


    def update(self, overrides):
        """ Apply the key/value pairs in *overrides*. Values of None are
            ignored, which lets unset command line options pass through.
        """

        for key, value in overrides.items():
            if value is None:
                continue

            try:
                cast = types[key]
            except KeyError:
                raise ValueError('unknown configuration key: ' + str(key))

            try:
                value = cast(value)
            except (TypeError, ValueError):
                raise ValueError('invalid value for %s: %r' % (key, value))

            if value < 0 or (key == 'port' and value > 65535):
                raise ValueError('value out of range for %s: %r' % (key, value))

            if key == 'maximum':
                if value < fields.header_size or value > fields.maximum_size:
                    raise ValueError('maximum must be between %d and %d bytes' % (fields.header_size, fields.maximum_size))

            self._values[key] = value


    def copy(self):
        return Configuration(self._values)


# end of class Configuration



def directory(default=None):
    """ Return the directory where the configuration file is found. This
        defaults to ``$HOME/.swstat``, but can be overridden by calling this
        method with an absolute path, or by setting the ``SWSTAT_HOME``
        environment variable before the first invocation of this method.
    """

    if default is not None:
        default = str(default)
        default = os.path.expandvars(default)

        if os.path.isabs(default):
            pass
        else:
            raise ValueError('the default directory must be an absolute path')

        os.environ['SWSTAT_HOME'] = default
        directory.found = default


    found = directory.found

    if found is not None:
        return found

    try:
        found = os.environ['SWSTAT_HOME']
    except KeyError:
        pass
    else:
        directory.found = found
        return found

    try:
        home = os.environ['HOME']
    except KeyError:
        raise RuntimeError('SWSTAT_HOME and HOME environment variables not set, cannot determine swstat configuration directory')

    found = os.path.join(home, '.swstat')

    directory.found = found
    return found

directory.found = None



def load(path=None):
    """ Return a :class:`Configuration` with the defaults overridden by the
        contents of *path*, or of ``client.json`` in the configuration
        :func:`directory` if no *path* is given. A missing default file is
        not an error; a missing explicit *path* is.
    """

    if path is None:
        path = os.path.join(directory(), filename)
        if os.path.exists(path) == False:
            return Configuration()

    with open(path, 'rb') as handle:
        raw = handle.read()

    try:
        loaded = json.loads(raw)
    except json.DecodeError as e:
        raise ValueError('malformed configuration file %s: %s' % (path, e))

    if isinstance(loaded, dict) == False:
        raise ValueError('configuration file %s must contain a JSON object' % (path))

    return Configuration(loaded)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
