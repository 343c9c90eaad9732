"""Built-in ``distmatrix`` sub-commands: ``matrix``, ``cache``, ``config``."""
