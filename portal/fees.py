import logging
import re

from portal.config import SystemConfig
from portal.models import FeeStructure, normalize_study_mode

logger = logging.getLogger(__name__)

# Map common level terms to numeric levels
LEVEL_MAPPING = {
    'undergraduate': '100',
    'hnd1': '100',
    'year1': '100',
    'hnd2': '200',
    'year2': '200',
    'hnd3': '300',
    'year3': '300',
    'hnd4': '400',
    'year4': '400',
}


def normalize_level(level):
    """Reduce "Level 100", "L200", "year3" etc. to "100".."400" """
    if level is None:
        return ''
    text = re.sub(r'^level\s*', '', str(level).strip(), flags=re.IGNORECASE)
    text = re.sub(r'^l(?=\d)', '', text, flags=re.IGNORECASE)
    text = text.replace(' ', '')
    return LEVEL_MAPPING.get(text.lower(), text)


def get_fee_structure(level, study_mode, table=None):
    """Fee structure for a level and study mode, or None when there is no fee data"""
    table = SystemConfig.FEE_STRUCTURES if table is None else table
    mode = normalize_study_mode(study_mode)
    if mode is None:
        logger.info("No fee data for unknown study mode %r", study_mode)
        return None

    level_key = normalize_level(level)
    fee_data = table.get(mode.value, {}).get(level_key)
    if not fee_data:
        logger.info("No fee structure for level %r (%s)", level, mode.value)
        return None

    return FeeStructure(
        level=level_key,
        study_mode=mode,
        total=fee_data['total'],
        installments=fee_data['installments'],
    )


def installment_due(structure, period_index):
    """Amount cumulatively due by the end of the given semester/trimester (1-based)"""
    if period_index < 1:
        return 0.0
    return round(sum(structure.installments[:period_index]), 2)


def format_currency(amount, symbol=None):
    symbol = SystemConfig.CURRENCY_SYMBOL if symbol is None else symbol
    return f"{symbol}{amount:,.2f}"


ONES = ['', 'One', 'Two', 'Three', 'Four', 'Five', 'Six', 'Seven', 'Eight', 'Nine']
TEENS = ['Ten', 'Eleven', 'Twelve', 'Thirteen', 'Fourteen', 'Fifteen', 'Sixteen',
         'Seventeen', 'Eighteen', 'Nineteen']
TENS = ['', '', 'Twenty', 'Thirty', 'Forty', 'Fifty', 'Sixty', 'Seventy', 'Eighty', 'Ninety']
THOUSANDS = ['', 'Thousand', 'Million', 'Billion']


def _hundreds_in_words(number):
    words = []
    if number > 99:
        words += [ONES[number // 100], 'Hundred']
        number %= 100
        if number:
            words.append('and')
    if number > 19:
        words.append(TENS[number // 10])
        number %= 10
    elif number > 9:
        words.append(TEENS[number - 10])
        number = 0
    if number:
        words.append(ONES[number])
    return words


def amount_in_words(amount, currency='Ghana Cedis'):
    """Whole-currency amount spelled out for admission letters and receipts"""
    number = int(round(amount))
    if number == 0:
        return f'Zero {currency}'

    groups = []
    index = 0
    while number > 0:
        chunk = number % 1000
        if chunk:
            part = _hundreds_in_words(chunk)
            if THOUSANDS[index]:
                part.append(THOUSANDS[index])
            groups.insert(0, ' '.join(part))
        number //= 1000
        index += 1

    return f"{' '.join(groups)} {currency}"
