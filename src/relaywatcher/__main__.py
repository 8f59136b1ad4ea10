# SPDX-FileCopyrightText: 2025 OmniNode.ai Inc.
# SPDX-License-Identifier: MIT

"""Allow ``python -m relaywatcher``."""

from relaywatcher.runtime.cli import main

if __name__ == "__main__":
    main()
