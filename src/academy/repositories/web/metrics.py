# third parties
from prometheus_client import Counter

count_host_attempts = Counter(
    name="academy_web_repository_host_attempts",
    documentation="Nb of requests sent to a host of a pool",
)
count_failovers = Counter(
    name="academy_web_repository_failovers",
    documentation="Nb of host failures recovered by trying another host of the pool",
)
count_exhausted_calls = Counter(
    name="academy_web_repository_exhausted_calls",
    documentation="Nb of calls that failed on every host of the pool",
)
