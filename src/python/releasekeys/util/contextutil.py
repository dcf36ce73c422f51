# coding=utf-8
# Copyright 2015 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from contextlib import contextmanager
import os
import shutil
import tempfile

from releasekeys.util.dirutil import safe_delete


@contextmanager
def environment_as(**kwargs):
  """Update the environment to the supplied values, for example:

  with environment_as(ANDROID_KEY_ALIAS='upload', ANDROID_KEY_PASSWORD=None):
    resolve_release_keys()

  A value of None unsets the variable. The previous environment is restored on exit.
  """
  old_environment = {}

  def setenv(key, val):
    if val is not None:
      os.environ[key] = val
    else:
      os.environ.pop(key, None)

  for key, val in kwargs.items():
    old_environment[key] = os.environ.get(key)
    setenv(key, val)
  try:
    yield
  finally:
    for key, val in old_environment.items():
      setenv(key, val)


@contextmanager
def temporary_dir(root_dir=None, cleanup=True):
  """A with-context that creates a temporary directory.

  :param string root_dir: The parent directory to create the temporary directory.
  :param bool cleanup: Whether or not to clean up the temporary directory.
  """
  path = tempfile.mkdtemp(dir=root_dir)
  try:
    yield path
  finally:
    if cleanup:
      shutil.rmtree(path, ignore_errors=True)


@contextmanager
def temporary_file(root_dir=None, cleanup=True, suffix=''):
  """A with-context that creates a temporary text file and yields it open for writing.

  Callers that hand the path to a reader should close the file first.

  :param string root_dir: The parent directory to create the temporary file.
  :param bool cleanup: Whether or not to clean up the temporary file.
  """
  with tempfile.NamedTemporaryFile(mode='w', suffix=suffix, dir=root_dir, delete=False) as fd:
    try:
      yield fd
    finally:
      if cleanup:
        safe_delete(fd.name)
