# Sphinx configuration for the GitHub Issue Bridge API reference.

import os
import sys
sys.path.insert(0, os.path.abspath('../src'))

from issue_bridge import __version__  # noqa: E402

project = 'GitHub Issue Bridge'
copyright = '2024, Trickl'
author = 'Trickl'
version = __version__
release = __version__

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.napoleon',
    'sphinx.ext.viewcode',
    'sphinx.ext.intersphinx',
    'sphinx_autodoc_typehints',
]

templates_path = ['_templates']
exclude_patterns = ['_build', 'Thumbs.db', '.DS_Store']

html_theme = 'sphinx_rtd_theme'
html_title = f'GitHub Issue Bridge {release}'

# The issue models are frozen dataclasses; their generated __init__ adds
# nothing over the field list, so only documented members are shown.
autodoc_default_options = {
    'members': True,
    'member-order': 'bysource',
    'show-inheritance': True,
}
typehints_defaults = 'comma'

# Docstrings use Google-style "Raises:" sections.
napoleon_google_docstring = True
napoleon_numpy_docstring = False

intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
    'requests': ('https://requests.readthedocs.io/en/latest', None),
    'pydantic': ('https://docs.pydantic.dev/latest', None),
}
