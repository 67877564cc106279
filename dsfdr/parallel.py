"""Worker pool shared by split trials and nodewise regressions."""

import logging
from typing import Any, Callable, Iterable, List, Optional

from joblib import Parallel, delayed

logger = logging.getLogger(__name__)


def parallel_map(
    func: Callable[..., Any],
    items: Iterable,
    n_jobs: Optional[int] = None,
    prefer: Optional[str] = None,
) -> List[Any]:
    """
    Apply ``func`` to every item, possibly in parallel.

    Results are returned in the order of ``items`` whatever the completion
    order. ``func`` must not mutate shared state.

    Parameters
    ----------
    func : callable
        Function of one argument.
    items : iterable
        Arguments.
    n_jobs : int, optional
        Number of workers, with joblib semantics (-1 uses all cores).
        None or 1 runs a plain loop in the calling thread.
    prefer : {'processes', 'threads'}, optional
        Backend hint passed to joblib.

    Returns
    -------
    list
    """
    items = list(items)
    if n_jobs is None or n_jobs == 1 or len(items) <= 1:
        return [func(item) for item in items]
    logger.debug("Dispatching %d tasks to %s workers", len(items), n_jobs)
    return Parallel(n_jobs=n_jobs, prefer=prefer)(delayed(func)(item) for item in items)
