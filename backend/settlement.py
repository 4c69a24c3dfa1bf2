# backend/settlement.py
import structlog

logger = structlog.get_logger(__name__)

# Anything below one cent is treated as settled
TOLERANCE = 0.01

# Lower bound for the chain collapsing loop guard
MIN_CHAIN_ITERATIONS = 1000


class Transaction:
    def __init__(self, payer, amount, participants, date=None):
        self.payer = payer
        self.amount = float(amount)
        # Participants split equally, so duplicates only count once
        self.participants = list(dict.fromkeys(participants or []))
        self.date = date

    def __repr__(self):
        return (f"Transaction(payer={self.payer!r}, amount={self.amount!r}, "
                f"participants={self.participants!r}, date={self.date!r})")


class Debt:
    def __init__(self, debtor, creditor, amount):
        self.debtor = debtor
        self.creditor = creditor
        self.amount = amount

    def to_dict(self):
        return {'from': self.debtor, 'to': self.creditor, 'amount': self.amount}

    def __eq__(self, other):
        if not isinstance(other, Debt):
            return NotImplemented
        return (self.debtor, self.creditor, self.amount) == (other.debtor, other.creditor, other.amount)

    def __hash__(self):
        return hash((self.debtor, self.creditor, self.amount))

    def __repr__(self):
        return f"Debt({self.debtor!r} -> {self.creditor!r}: {self.amount:.2f})"


class PairwiseLedger:
    """Debtor -> creditor -> amount owed, in insertion order.

    One ledger belongs to one simplify_debts call and is thrown away after.
    """

    def __init__(self):
        self._debts = {}

    def get(self, debtor, creditor):
        return self._debts.get(debtor, {}).get(creditor, 0.0)

    def add(self, debtor, creditor, amount):
        creditors = self._debts.setdefault(debtor, {})
        creditors[creditor] = creditors.get(creditor, 0.0) + amount

    def set(self, debtor, creditor, amount):
        self._debts.setdefault(debtor, {})[creditor] = amount

    def creditors_of(self, debtor):
        return self._debts.get(debtor, {})

    def discard_if_settled(self, debtor, creditor):
        creditors = self._debts.get(debtor)
        if creditors is None:
            return
        if creditor in creditors and creditors[creditor] < TOLERANCE:
            del creditors[creditor]
        if not creditors:
            del self._debts[debtor]

    def purge(self):
        for debtor in list(self._debts):
            creditors = self._debts[debtor]
            for creditor in list(creditors):
                if creditors[creditor] < TOLERANCE:
                    del creditors[creditor]
            if not creditors:
                del self._debts[debtor]

    def participants(self):
        people = set(self._debts)
        for creditors in self._debts.values():
            people.update(creditors)
        return people

    def items(self):
        for debtor, creditors in self._debts.items():
            for creditor, amount in creditors.items():
                yield debtor, creditor, amount

    def __len__(self):
        return sum(len(creditors) for creditors in self._debts.values())


def accumulate_pairwise(transactions, ledger=None):
    ledger = ledger if ledger is not None else PairwiseLedger()

    for t in transactions:
        # Nobody to split with, nothing to divide by
        if not t.participants:
            continue

        split_amount = t.amount / len(t.participants)

        for person in t.participants:
            if person == t.payer:
                continue
            ledger.add(person, t.payer, split_amount)

    logger.debug("pairwise_debts_accumulated", transactions=len(transactions), pairs=len(ledger))
    return ledger


def consolidate_bidirectional(ledger):
    processed_pairs = set()

    for debtor_a, creditor_b, _ in list(ledger.items()):
        pair_key = tuple(sorted((debtor_a, creditor_b)))
        if pair_key in processed_pairs:
            continue
        processed_pairs.add(pair_key)

        a_to_b = ledger.get(debtor_a, creditor_b)
        b_to_a = ledger.get(creditor_b, debtor_a)
        if b_to_a <= 0:
            continue

        net_amount = abs(a_to_b - b_to_a)
        ledger.set(debtor_a, creditor_b, net_amount if a_to_b > b_to_a else 0.0)
        ledger.set(creditor_b, debtor_a, net_amount if b_to_a > a_to_b else 0.0)

        logger.debug("bidirectional_debt_consolidated", pair=pair_key,
                     forward=round(a_to_b, 2), backward=round(b_to_a, 2), net=round(net_amount, 2))

    ledger.purge()
    return ledger


def _find_chain(ledger):
    for debtor_a, intermediary_b, a_to_b in ledger.items():
        for creditor_c, b_to_c in ledger.creditors_of(intermediary_b).items():
            # A chain back into its own origin would become a self-debt
            if creditor_c == debtor_a:
                continue
            transfer = min(a_to_b, b_to_c)
            if transfer < TOLERANCE:
                continue
            return debtor_a, intermediary_b, creditor_c, transfer
    return None


def collapse_chains(ledger, max_iterations=None):
    if max_iterations is None:
        people = len(ledger.participants())
        pair_count = people * (people - 1)
        max_iterations = max(MIN_CHAIN_ITERATIONS, pair_count ** 2)
    chains_found = 0

    changed = True
    while changed:
        changed = False
        chain = _find_chain(ledger)
        if chain is None:
            continue
        if chains_found >= max_iterations:
            logger.warning("chain_collapse_limit_reached", iterations=chains_found)
            break

        debtor_a, intermediary_b, creditor_c, transfer = chain
        # A now owes C directly, both legs shrink by the same amount
        ledger.add(debtor_a, creditor_c, transfer)
        ledger.set(debtor_a, intermediary_b, ledger.get(debtor_a, intermediary_b) - transfer)
        ledger.set(intermediary_b, creditor_c, ledger.get(intermediary_b, creditor_c) - transfer)
        ledger.discard_if_settled(debtor_a, intermediary_b)
        ledger.discard_if_settled(intermediary_b, creditor_c)

        chains_found += 1
        changed = True
        logger.debug("debt_chain_collapsed", chain=(debtor_a, intermediary_b, creditor_c),
                     transfer=round(transfer, 2))

    return chains_found


def materialize(ledger):
    results = []
    for debtor, creditor, amount in ledger.items():
        if amount >= TOLERANCE:
            results.append(Debt(debtor, creditor, round(amount, 2)))
    return results


def simplify_debts(transactions):
    """Consolidate who owes whom across a list of Transactions.

    1. Every participant owes the payer their equal share
    2. A->B and B->A are netted into a single direction
    3. Chains A->B->C are collapsed into direct A->C debts until none are left
    4. What is left becomes the Debt list, rounded to cents
    """
    ledger = accumulate_pairwise(transactions)
    consolidate_bidirectional(ledger)
    chains_found = collapse_chains(ledger)
    debts = materialize(ledger)

    logger.debug("debts_simplified", chains=chains_found, debts=len(debts))
    return debts
