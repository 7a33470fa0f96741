"""CSV export of batch results."""

import csv
import logging
from typing import Dict, Iterable

from .models import BatchItem

CSV_COLUMNS = [
    'timestamp',
    'username',
    'r4r_score',
    'ethos_score',
    'ethos_xp',
    'risk_level',
    'total_reviews_given',
    'total_reviews_received',
    'avg_reciprocal_time',
    'processing_time_ms',
    'status',
    'error_message',
    'discovery_method',
]


def batch_item_to_row(item: BatchItem) -> Dict:
    """Flatten a batch item into one CSV row."""
    result = item.result
    subject = result.subject if result else item.subject
    row = {
        'timestamp': item.finished_at.strftime('%Y-%m-%d %H:%M:%S'),
        'username': subject.display_name,
        'r4r_score': '',
        'ethos_score': '' if subject.score is None else subject.score,
        'ethos_xp': '' if subject.xp is None else subject.xp,
        'risk_level': '',
        'total_reviews_given': '',
        'total_reviews_received': '',
        'avg_reciprocal_time': '',
        'processing_time_ms': '',
        'status': item.status,
        'error_message': item.error_message,
        'discovery_method': item.discovery_method,
    }
    if result is not None:
        row.update({
            'r4r_score': result.final_score,
            'risk_level': result.risk_level.value,
            'total_reviews_given': result.given,
            'total_reviews_received': result.received,
            'avg_reciprocal_time': f"{result.avg_reciprocal_time_days:.4f}",
            'processing_time_ms': result.processing_time_ms,
        })
    return row


def write_batch_csv(items: Iterable[BatchItem], path: str) -> int:
    """Write batch items to a CSV file.

    Returns:
        Number of rows written
    """
    count = 0
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=CSV_COLUMNS)
        writer.writeheader()
        for item in items:
            writer.writerow(batch_item_to_row(item))
            count += 1

    logging.info(f"Exported {count} rows to {path}")
    return count
