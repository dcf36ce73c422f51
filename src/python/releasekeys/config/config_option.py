# coding=utf-8
# Copyright 2015 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).


class ConfigOption(object):
  """Registry of the options read from a signing ini file.

  Each option is declared once, next to the code that reads it, and read with
  ``config.get_option(option)``.
  """

  class Option(object):
    """One section.option of the signing ini file, with the type and default to read it with."""

    def __init__(self, section, option, help_str, valtype, default):
      self.section = section
      self.option = option
      self.help = help_str
      self.valtype = valtype
      self.default = default

  _OPTIONS = {}

  @classmethod
  def for_section(cls, section):
    """Return the registered options of a section, sorted by option name."""
    return [cls._OPTIONS[key] for key in sorted(cls._OPTIONS) if key[0] == section]

  @classmethod
  def create(cls, section, option, help, valtype=str, default=None):
    """Declare an option.

    :raises: ``ValueError`` if section.option is already declared.
    """
    if (section, option) in cls._OPTIONS:
      raise ValueError('Option {0}.{1} already exists.'.format(section, option))
    new_opt = cls.Option(section, option, help, valtype, default)
    cls._OPTIONS[(section, option)] = new_opt
    return new_opt
