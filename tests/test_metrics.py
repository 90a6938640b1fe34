import logging

from wave_sim.utils.metrics import log_metrics, summarize_metrics

METRICS = {
    "end_time": 110.0,
    "packets_sent": 1,
    "packets_received": 1,
    "packets_dropped": 1,
    "sent_per_node": {0: 1},
    "received_per_node": {1: 1},
    "dropped_per_node": {2: 1},
}


def test_metrics_summary():
    assert summarize_metrics(METRICS) == [
        "Simulation ended at 110s: 1 sent, 1 received, 1 dropped",
        "  node 0: sent=1 received=0 dropped=0",
        "  node 1: sent=0 received=1 dropped=0",
        "  node 2: sent=0 received=0 dropped=1",
    ]


def test_metrics_are_logged_at_info(caplog):
    with caplog.at_level(logging.INFO, logger="wave_sim.utils.metrics"):
        log_metrics(METRICS)

    assert len(caplog.records) == 4
    assert caplog.records[0].getMessage().startswith("Simulation ended at 110s")
