"""
End to end tests for the lsp-stats command line.

Tests:
- Full run prints the report and exits 0
- Each failure class prints a message, exits 1 and emits no stats block
"""

from lsp_stats.cli import build_parser, load_config, main
from lsp_stats.config import month_window

START, END = (t.timestamp() for t in month_window("2024-04"))


def forward(**overrides):
    fwd = {
        "in_channel": "100x1x0",
        "out_channel": "102x3x0",
        "fee_msat": 50,
        "out_msat": 2_000_000,
        "received_time": START + 86400.0,
        "status": "settled",
    }
    fwd.update(overrides)
    return fwd


def cli_args(files, routing_peers):
    args = [
        "--month", "2024-04",
        "--forwards", files["forwards_file"],
        "--channels", files["channels_file"],
        "--closed-channels", files["closed_channels_file"],
        "--node-name", "testlsp",
    ]
    for peer in routing_peers:
        args += ["--routing-peer", f"{peer.name}={peer.pubkey}"]
    return args


class TestRun:

    def test_full_report(self, snapshot_files, routing_peers, capsys):
        files = snapshot_files([
            forward(),
            forward(fee_msat=40_000, out_msat=5_000_000),
            forward(in_channel="101x2x0"),
            forward(received_time=END),
        ])

        rc = main(cli_args(files, routing_peers))

        out = capsys.readouterr().out
        assert rc == 0
        assert "Report for 2024-04" in out
        assert "LSP node stats - testlsp" in out
        assert "\n3,9000000,40100,2,4000000,100\n" in out
        assert "Routing to/from only routing nodes 'RouterA, RouterC'" in out
        assert "\n2,7000000,40050\n" in out

    def test_unknown_channel_fails(self, snapshot_files, routing_peers, capsys):
        files = snapshot_files([forward(), forward(out_channel="999x9x9")])

        rc = main(cli_args(files, routing_peers))

        out = capsys.readouterr().out
        assert rc == 1
        assert "failed to get lsp stats for testlsp" in out
        assert "999x9x9" in out
        assert "LSP node stats" not in out

    def test_missing_file_fails(self, snapshot_files, routing_peers, tmp_path, capsys):
        files = snapshot_files([forward()])
        files["forwards_file"] = str(tmp_path / "absent.json.gz")

        rc = main(cli_args(files, routing_peers))

        out = capsys.readouterr().out
        assert rc == 1
        assert "failed to initialize nodes" in out
        assert "absent.json.gz" in out
        assert "LSP node stats" not in out

    def test_malformed_amount_fails_cleanly(self, snapshot_files, routing_peers, capsys):
        files = snapshot_files([forward(fee_msat="xmsat")])

        rc = main(cli_args(files, routing_peers))

        out = capsys.readouterr().out
        assert rc == 1
        assert "failed to initialize nodes" in out
        assert "forwards[0]" in out
        assert "LSP node stats" not in out

    def test_bad_month_fails(self, snapshot_files, routing_peers, capsys):
        args = cli_args(snapshot_files([forward()]), routing_peers)
        args[1] = "2024-13"

        rc = main(args)

        out = capsys.readouterr().out
        assert rc == 1
        assert "failed to parse month" in out
        assert "Report for" not in out

    def test_bad_routing_peer_fails(self, snapshot_files, capsys):
        args = cli_args(snapshot_files([forward()]), []) + ["--routing-peer", "nopubkey"]

        rc = main(args)

        assert rc == 1
        assert "NAME=PUBKEY" in capsys.readouterr().out


class TestArgumentParsing:

    def test_no_arguments_uses_defaults(self):
        config = load_config(build_parser().parse_args([]))

        assert config.month == "2024-04"
        assert config.node_name == "breezc"
        assert len(config.routing_peers) == 2

    def test_routing_peers_replace_defaults(self):
        args = build_parser().parse_args(["--routing-peer", "X=02" + "1" * 64])

        config = load_config(args)

        assert [p.name for p in config.routing_peers] == ["X"]

    def test_heuristic_overrides(self):
        args = build_parser().parse_args(["--open-fee-ppm", "1000", "--open-min-msat", "0"])

        config = load_config(args)

        assert config.open_fee_ppm == 1000
        assert config.open_min_msat == 0
