# -*- coding: utf-8 -*-
"""Run with python -m Priority_Pruner."""
import sys as _sys

from .prune_snps import main

if __name__ == '__main__':
    _sys.exit(main())
