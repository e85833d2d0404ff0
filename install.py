#!/usr/bin/env python3
# filename: install.py
# -*- coding: utf-8 -*-
"""
Entry point for the OpenClaw VPS provisioner.

The reboot-resume crontab entry re-invokes this file by its absolute path,
so it must stay at the project root.
"""

import sys

from provisioner.main_installer import main

if __name__ == "__main__":
    sys.exit(main())
