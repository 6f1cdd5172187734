"""``duet asset`` — resolve a logical asset key through the app's manifests."""

import argparse

from duet.assets.manifest import AssetDomain
from duet.cli._resolve import app_from_args


def run_asset(args: argparse.Namespace) -> None:
    app = app_from_args(args)
    print(app.assets.resolve(args.key, AssetDomain(args.domain)))
