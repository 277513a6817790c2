# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Game rules and typed remote calls."""

from __future__ import annotations
