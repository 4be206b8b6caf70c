#!/usr/bin/env python3
"""
AdStats — облік рекламних кампаній (Desktop App)
Точка входу.
"""

import logging
import sys
import os

# Додаємо кореневу папку в path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from adstats.constants import LOG_LEVEL
from adstats.gui import App


def main():
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = App()
    app.mainloop()


if __name__ == "__main__":
    main()
