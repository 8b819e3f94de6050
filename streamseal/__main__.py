# -*- coding: utf-8 -*-
"""Allows `python -m streamseal`."""

from .main import main

main()
