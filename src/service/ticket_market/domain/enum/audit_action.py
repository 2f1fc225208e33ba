from enum import StrEnum


class AuditAction(StrEnum):
    RESERVE = 'Reserve'
    MINT = 'Mint'
    PAYMENT = 'Payment'
    PAYMENT_FAILED = 'PaymentFailed'
    LIST = 'List'
    DELIST = 'Delist'
    TRANSFER = 'Transfer'
    RESALE = 'Resale'
    REFUND = 'Refund'
    EXPIRE = 'Expire'
    CHECK_IN = 'CheckIn'
    GATE_VERIFY = 'GateVerify'
