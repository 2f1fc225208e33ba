from enum import StrEnum


class ClassType(StrEnum):
    STANDARD = 'Standard'
    PREMIUM = 'Premium'
    VIP = 'VIP'
