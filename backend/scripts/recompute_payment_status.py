#!/usr/bin/env python3
"""
Script to bring the stored payment_status of every sales transaction back in
line with its allocations. Safe to run any number of times.

Run from the backend directory:  python -m scripts.recompute_payment_status
"""

from sqlalchemy.orm import Session
from database import SessionLocal
from models.sales_transactions import SalesTransaction
from services.receivables import recompute_transaction_status

def recompute_payment_status(db: Session) -> int:
    """Recompute every transaction's status. Returns how many rows changed."""
    changed = 0
    for txn in db.query(SalesTransaction).order_by(SalesTransaction.id.asc()).all():
        before = txn.payment_status
        snap = recompute_transaction_status(db, txn)
        if before != snap.status:
            changed += 1
            print(f"Transaction {txn.id} ({txn.invoice_no}): {before} -> {snap.status}")
    return changed

if __name__ == "__main__":
    db: Session = SessionLocal()
    try:
        updated_count = recompute_payment_status(db)
        db.commit()
        print(f"\nSuccessfully updated {updated_count} sales transactions.")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
