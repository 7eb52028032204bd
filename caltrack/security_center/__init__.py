# -*- coding: utf-8 -*-
"""Security center: security events, IP blocks and reports."""
