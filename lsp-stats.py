#!/usr/bin/env python3
"""
lsp-stats: monthly routing statistics for a Lightning Service Provider node

Reads gzipped snapshots of a Core Lightning node's forwarding history and
channel lists and reports, for one calendar month:

- total forwards, volume and fees
- the same totals without probable channel opens (high-fee forwards that
  pay for a just-in-time channel rather than for routing)
- totals for traffic exchanged only between the configured routing nodes

Taking the snapshots (listforwards status=settled, listpeerchannels,
listclosedchannels, each piped through gzip) is left to the operator; make
sure all three are taken at the same time.

Dependencies:
- pyln-client: Millisatoshi amount parsing

License: MIT
"""

import sys

from lsp_stats.cli import main


if __name__ == "__main__":
    sys.exit(main())
