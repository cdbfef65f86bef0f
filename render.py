#!/usr/bin/env python
"""CLI entry point for the sphere path tracer."""

import sys

from sphere_tracer.pipeline import main

if __name__ == "__main__":
    sys.exit(main())
