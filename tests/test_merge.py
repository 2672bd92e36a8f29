from datetime import datetime
from decimal import Decimal

from card_scraper.merge import (
    filter_old_transactions,
    fix_installments,
    merge,
    merge_month_results,
    prepare_transactions,
    sort_transactions_by_date,
)
from card_scraper.models import Currency, Installment, Transaction, TransactionType


def _txn(
    date: datetime,
    description: str = "סופר",
    charged: str = "-10",
    *,
    installment: Installment | None = None,
    memo: str = "",
    txn_type: TransactionType | None = None,
) -> Transaction:
    if txn_type is None:
        txn_type = TransactionType.INSTALLMENTS if installment else TransactionType.NORMAL
    return Transaction(
        type=txn_type,
        date=date,
        processed_date=date,
        original_amount=-Decimal(charged),
        original_currency=Currency.ILS,
        charged_amount=Decimal(charged),
        charged_currency=Currency.ILS,
        description=description,
        memo=memo,
        installment=installment,
    )


JAN = datetime(2024, 1, 10)
FEB = datetime(2024, 2, 10)
MAR = datetime(2024, 3, 10)


def test_merge_returns_new_map_and_keeps_inputs_untouched():
    a1, a2, b1 = _txn(JAN, "a1"), _txn(FEB, "a2"), _txn(FEB, "b1")
    acc = {"A": [a1]}
    result = {"A": [a2], "B": [b1]}

    merged = merge(acc, result)

    assert merged == {"A": (a1, a2), "B": (b1,)}
    assert acc == {"A": [a1]}
    assert result == {"A": [a2], "B": [b1]}


def test_merge_month_results_follows_submission_order():
    current = _txn(JAN, "open cycle")
    older = _txn(MAR, "older month")
    merged = merge_month_results([{"A": [older]}, {"A": [current]}])
    assert merged["A"] == (older, current)
    assert merge_month_results([]) == {}


def test_fix_installments_keeps_first_instance_per_plan():
    plan_jan = _txn(JAN, "ספה", "-250", installment=Installment(1, 4))
    plan_feb = _txn(FEB, "ספה", "-250", installment=Installment(2, 4))
    other_plan = _txn(FEB, "ספה", "-99", installment=Installment(1, 4))
    normal = _txn(FEB, "ספה", "-250")

    out = fix_installments([plan_jan, normal, plan_feb, other_plan])

    assert out == [plan_jan, normal, other_plan]


def test_fix_installments_is_idempotent_under_self_merge():
    txns = fix_installments(
        [
            _txn(JAN, "ספה", "-250", installment=Installment(1, 4)),
            _txn(FEB, "ספה", "-250", installment=Installment(2, 4)),
            _txn(FEB, "מחשב", "-400", installment=Installment(3, 6)),
            _txn(MAR, "קפה", "-12"),
        ]
    )
    doubled = merge({"A": txns}, {"A": txns})["A"]
    again = fix_installments(doubled)
    plans = {(t.description, t.installment.total) for t in again if t.installment}
    assert plans == {("ספה", 4), ("מחשב", 6)}
    assert len([t for t in again if t.installment]) == 2


def test_sort_is_stable_for_equal_dates():
    first, second, earlier = _txn(FEB, "first"), _txn(FEB, "second"), _txn(JAN, "earlier")
    assert sort_transactions_by_date([first, second, earlier]) == [earlier, first, second]


def test_filter_drops_transactions_before_start():
    start = datetime(2024, 2, 1)
    kept = filter_old_transactions([_txn(JAN), _txn(FEB), _txn(start)], start, False)
    assert [t.date for t in kept] == [FEB, start]


def test_filter_exempts_installments_when_combined():
    start = datetime(2024, 2, 1)
    old_plan = _txn(JAN, installment=Installment(3, 10))
    old_normal = _txn(JAN)
    assert filter_old_transactions([old_plan, old_normal], start, True) == [old_plan]
    assert filter_old_transactions([old_plan, old_normal], start, False) == []


def test_filter_is_monotonic_in_start():
    txns = [_txn(datetime(2024, m, 1)) for m in range(1, 13)]
    counts = [
        len(filter_old_transactions(txns, datetime(2024, m, 15), False)) for m in range(1, 13)
    ]
    assert counts == sorted(counts, reverse=True)


def test_prepare_transactions_dedups_sorts_and_filters():
    start = datetime(2024, 1, 1)
    plan_feb = _txn(FEB, "ספה", "-250", installment=Installment(2, 4))
    plan_jan = _txn(JAN, "ספה", "-250", installment=Installment(1, 4))
    old = _txn(datetime(2023, 12, 20), "ישן")
    coffee = _txn(JAN, "קפה")

    assert prepare_transactions([plan_feb, old, plan_jan, coffee], start, False) == [
        coffee,
        plan_feb,
    ]
    assert prepare_transactions([plan_feb, old, plan_jan, coffee], start, True) == [
        plan_jan,
        coffee,
        plan_feb,
    ]


def test_normal_transactions_with_numeric_memo_are_not_deduplicated():
    # A standing order's memo holds two numbers, so it resolves installment info.
    memo = "הוראת קבע 1234 אסמכתא 5678"
    jan, feb = (
        _txn(
            d,
            "נטפליקס",
            "-49.90",
            installment=Installment(1234, 5678),
            memo=memo,
            txn_type=TransactionType.NORMAL,
        )
        for d in (JAN, FEB)
    )

    assert prepare_transactions([jan, feb], datetime(2024, 1, 1), False) == [jan, feb]


def test_combined_filter_does_not_exempt_normal_with_installment_info():
    start = datetime(2024, 2, 1)
    old_normal = _txn(
        JAN, "מנוי", "-30", installment=Installment(1, 12), txn_type=TransactionType.NORMAL
    )
    assert filter_old_transactions([old_normal], start, True) == []
