# backend/balances.py
from backend.settlement import simplify_debts


def net_balances(transactions):
    """Paid for others minus own share, straight from the transactions.

    Positive means the participant is owed money. This does not go through
    the simplification, so it can be used to check it.
    """
    balances = {}

    for t in transactions:
        if not t.participants:
            continue

        split_amount = t.amount / len(t.participants)
        for person in t.participants:
            if person == t.payer:
                continue
            balances[t.payer] = balances.get(t.payer, 0.0) + split_amount
            balances[person] = balances.get(person, 0.0) - split_amount

    return {person: round(amount, 2) for person, amount in balances.items()}


def net_balances_from_debts(debts):
    balances = {}
    for debt in debts:
        balances[debt.creditor] = balances.get(debt.creditor, 0.0) + debt.amount
        balances[debt.debtor] = balances.get(debt.debtor, 0.0) - debt.amount
    return {person: round(amount, 2) for person, amount in balances.items()}


def debts_for_participant(debts, participant):
    return [d for d in debts if participant in (d.debtor, d.creditor)]


def participant_balance(debts, participant):
    balance = 0.0
    for debt in debts_for_participant(debts, participant):
        if debt.creditor == participant:
            balance += debt.amount
        else:
            balance -= debt.amount
    return round(balance, 2)


def balance_series(transactions, participant):
    """Running balance of one participant, one point per transaction date.

    The debts are simplified again for every prefix of the date-sorted list,
    so each point is the participant's net position at the end of that day.
    Transactions without a date are left out.
    """
    dated = sorted((t for t in transactions if t.date), key=lambda t: t.date)

    series = []
    for i, t in enumerate(dated):
        # Only the last transaction of a day produces a point
        if i + 1 < len(dated) and dated[i + 1].date == t.date:
            continue
        debts = simplify_debts(dated[:i + 1])
        series.append({'date': t.date, 'balance': participant_balance(debts, participant)})

    return series
