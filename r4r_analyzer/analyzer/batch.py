"""Batch processing methods for R4RAnalyzer."""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence

from ..models import BatchItem, Subject

# Maximum number of subjects accepted by a single batch call
MAX_BATCH_SUBJECTS = 100


def analyze_batch(self, subjects: Sequence[Subject], batch_size: int = 5,
                  delay_between_batches: float = 1.0, discovery_method: str = 'manual',
                  save_results: bool = True) -> List[BatchItem]:
    """Analyze subjects in throttled chunks.

    Each chunk is processed in parallel; the runner sleeps between chunks.
    A subject whose data cannot be loaded becomes an error item and does
    not stop the batch.

    Args:
        subjects: Subjects to analyze
        batch_size: Number of subjects analyzed concurrently
        delay_between_batches: Seconds to wait between chunks
        discovery_method: Label recorded on every item (e.g. 'manual', 'leaderboard')
        save_results: Whether to save successful results to the store

    Returns:
        One BatchItem per analyzed subject, in input order
    """
    from .core import AnalysisError

    if len(subjects) > MAX_BATCH_SUBJECTS:
        logging.warning(f"Batch limited to {MAX_BATCH_SUBJECTS} of {len(subjects)} subjects")
        subjects = list(subjects)[:MAX_BATCH_SUBJECTS]

    batch_size = max(1, batch_size)
    items: List[Optional[BatchItem]] = [None] * len(subjects)
    processed = 0

    print(f"Starting batch R4R calculation for {len(subjects)} subjects...")

    for chunk_start in range(0, len(subjects), batch_size):
        chunk = list(enumerate(subjects))[chunk_start:chunk_start + batch_size]

        with ThreadPoolExecutor(max_workers=len(chunk)) as executor:
            future_to_index = {
                executor.submit(self.analyze_subject, subject): index
                for index, subject in chunk
            }

            for future in as_completed(future_to_index):
                index = future_to_index[future]
                subject = subjects[index]
                try:
                    result = future.result()
                except AnalysisError as e:
                    items[index] = BatchItem(subject=subject, status='error', error_message=str(e),
                                             discovery_method=discovery_method)
                    continue
                except Exception as e:
                    logging.error(f"Error processing {subject.display_name}: {e}", exc_info=True)
                    items[index] = BatchItem(subject=subject, status='error', error_message=str(e),
                                             discovery_method=discovery_method)
                    continue

                if save_results and self.store is not None:
                    self.store.save_result(result)

                items[index] = BatchItem(subject=result.subject, result=result,
                                         discovery_method=discovery_method)
                processed += 1
                print(f"  Processed {result.subject.display_name} ({result.final_score}% R4R score)", flush=True)

        if delay_between_batches > 0 and chunk_start + batch_size < len(subjects):
            time.sleep(delay_between_batches)

    print(f"Batch processing complete: {processed}/{len(subjects)} subjects processed")
    return items
