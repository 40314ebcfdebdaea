#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Entry point for running the package directly with python -m.

Usage Examples:
    python -m trustroute route --task coding --ram 8
    python -m trustroute default --urgency high
    python -m trustroute models --refresh
"""

from .main import main

if __name__ == "__main__":
    main()
