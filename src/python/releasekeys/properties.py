# coding=utf-8
# Copyright 2015 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

import logging

import javaproperties

from releasekeys.util.dirutil import safe_open


logger = logging.getLogger(__name__)


class PropertiesFile(object):
  """Reads and writes java properties files, e.g. an android project's key.properties.

  Files are read the way Gradle reads them through java.util.Properties: ISO-8859-1 text,
  ``key=value``, ``key: value`` or ``key value`` lines, '#' and '!' comments, backslash escapes
  and backslash line continuations.
  """

  class ParseError(Exception):
    """Indicates a properties file that could not be read or parsed."""

  ENCODING = 'iso-8859-1'

  @classmethod
  def parse(cls, path):
    """Parse the properties file at path into a dict.

    :param string path: path/to/file.properties
    :raises: ``PropertiesFile.ParseError`` if the file is unreadable, holds a bad escape or
      repeats a key.
    """
    try:
      with open(path, 'r', encoding=cls.ENCODING) as fp:
        pairs = javaproperties.load(fp, object_pairs_hook=list)
    except (IOError, OSError) as e:
      raise cls.ParseError('Failed to read properties file {0}: {1}'.format(path, e))
    except ValueError as e:
      raise cls.ParseError('Failed to parse properties file {0}: {1}'.format(path, e))

    properties = {}
    for key, value in pairs:
      if key in properties:
        raise cls.ParseError('Properties file {0} sets {1} more than once.'.format(path, key))
      properties[key] = value
    logger.debug('Read properties file: {0}'.format(path))
    return properties

  @classmethod
  def write(cls, path, values):
    """Write values to path as escaped ``key=value`` lines, creating parent directories as needed.

    :param string path: path/to/file.properties
    :param dict values: The keys and values to write, in iteration order.
    """
    with safe_open(path, 'w', encoding=cls.ENCODING) as fp:
      javaproperties.dump(values, fp, timestamp=False)
