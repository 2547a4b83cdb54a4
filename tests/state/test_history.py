from __future__ import annotations

import pytest

from poolsim.state.history import (
    PriceHistory,
    PriceHistoryPoint,
    Transaction,
    TransactionKind,
    TransactionLog,
)


def _tx(ts: float, kind: TransactionKind = TransactionKind.BUY, **kw) -> Transaction:
    return Transaction(
        timestamp=ts,
        kind=kind,
        input_amount=kw.get("input_amount", 1.0),
        input_token="ETH",
        output_amount=kw.get("output_amount", 2.0),
        output_token="SILK",
        price=100.0,
        token1_amount=kw.get("token1_amount"),
        token2_amount=kw.get("token2_amount"),
    )


class TestPriceHistory:
    def test_default_limit_is_twenty(self):
        h = PriceHistory()
        for i in range(25):
            h.append(PriceHistoryPoint(timestamp=float(i), price=1.0, price_usd=float(i)))
        assert h.limit == 20
        assert len(h) == 20
        assert [p.timestamp for p in h] == [float(i) for i in range(5, 25)]
        assert h.latest().timestamp == 24.0

    def test_clear(self):
        h = PriceHistory(limit=3)
        h.append(PriceHistoryPoint(1.0, 1.0, 1.0))
        h.clear()
        assert len(h) == 0
        assert h.latest() is None

    @pytest.mark.parametrize("limit", [0, -1, 2.5, True])
    def test_invalid_limit(self, limit):
        with pytest.raises(ValueError):
            PriceHistory(limit=limit)

    def test_point_to_dict(self):
        assert PriceHistoryPoint(1.0, 2.0, 3.0).to_dict() == {"timestamp": 1.0, "price": 2.0, "price_usd": 3.0}


class TestTransactionLog:
    def test_batch_is_prepended_newest_first(self):
        log = TransactionLog(limit=10)
        log.prepend([_tx(1), _tx(2)])
        log.prepend([_tx(3), _tx(4)])
        assert [t.timestamp for t in log.records()] == [4, 3, 2, 1]

    def test_truncates_to_limit(self):
        log = TransactionLog(limit=3)
        log.prepend([_tx(float(i)) for i in range(5)])
        assert [t.timestamp for t in log] == [4, 3, 2]

    def test_per_call_limit(self):
        log = TransactionLog(limit=20)
        log.prepend([_tx(float(i)) for i in range(15)])
        log.prepend([_tx(99.0)], limit=10)
        assert len(log) == 10
        assert log.records()[0].timestamp == 99.0

    def test_records_are_copies(self):
        log = TransactionLog()
        log.prepend([_tx(1)])
        log.records().clear()
        assert len(log) == 1


class TestTransaction:
    def test_trade_dict_omits_liquidity_fields(self):
        d = _tx(1).to_dict()
        assert d["kind"] == "buy"
        assert "token1_amount" not in d
        assert not _tx(1).is_liquidity

    def test_liquidity_dict(self):
        tx = _tx(1, TransactionKind.ADD_LIQUIDITY, token1_amount=1.0, token2_amount=250.0)
        d = tx.to_dict()
        assert tx.is_liquidity
        assert (d["token1_amount"], d["token2_amount"]) == (1.0, 250.0)

    def test_effective_rate(self):
        assert _tx(1, input_amount=2.0, output_amount=5.0).effective_rate == 2.5
        assert _tx(1, input_amount=0.0).effective_rate == 0.0
