import pytest

from tick_scheduler.engine import SimulationEngine, simulate
from tick_scheduler.errors import InvalidPolicy, InvalidQuantum, MalformedEvent
from tick_scheduler.models import EventRecord, ProcessTable
from tick_scheduler.policies import Policy
from tick_scheduler.report import format_report


def _arrive(t, burst):
    return EventRecord(arrival_time=t, duration=burst)


def _block(t, duration):
    return EventRecord(arrival_time=t, duration=duration, is_block_request=True)


def _by_pid(result):
    return {p.pid: p for p in result.processes}


def _slices(result):
    return [(s.pid, s.start_time, s.end_time) for s in result.timeline]


def _mixed_workload():
    return [
        _arrive(0, 6),
        _arrive(1, 3),
        _block(2, 2),
        _arrive(3, 4),
        _block(5, 3),
        _arrive(6, 2),
        _block(9, 1),
        _arrive(20, 3),
    ]


def test_fcfs_two_arrivals():
    res = simulate([_arrive(0, 5), _arrive(1, 3)], Policy.FCFS)
    a, b = res.processes
    assert (a.completion_time, a.waiting_time, a.turnaround_time) == (5, 0, 5)
    assert (b.completion_time, b.waiting_time, b.turnaround_time) == (8, 4, 7)
    assert res.system.avg_waiting == 2.0
    assert res.system.avg_turnaround == 6.0


def test_rr_quantum_2_alternates():
    res = simulate([_arrive(0, 4), _arrive(0, 3)], Policy.RR, quantum=2)
    assert _slices(res) == [(1, 0, 2), (2, 2, 4), (1, 4, 6), (2, 6, 7)]
    a, b = res.processes
    assert (a.completion_time, a.waiting_time, a.turnaround_time, a.response_time) == (6, 2, 6, 0)
    assert (b.completion_time, b.waiting_time, b.turnaround_time, b.response_time) == (7, 4, 7, 2)


def test_srtn_shorter_arrival_preempts():
    res = simulate([_arrive(0, 5), _arrive(2, 1)], Policy.SRTN)
    assert _slices(res) == [(1, 0, 2), (2, 2, 3), (1, 3, 6)]
    procs = _by_pid(res)
    assert procs[2].completion_time == 3
    assert procs[1].completion_time == 6
    assert procs[1].waiting_time == 1


def test_srtn_equal_remaining_does_not_preempt():
    res = simulate([_arrive(0, 4), _arrive(2, 2)], Policy.SRTN)
    assert _slices(res) == [(1, 0, 4), (2, 4, 6)]


def test_block_then_resume():
    res = simulate([_arrive(0, 4), _block(2, 3)], Policy.FCFS)
    (a,) = res.processes
    assert _slices(res) == [(1, 0, 2), (1, 5, 7)]
    assert a.completion_time == 7
    assert a.turnaround_time == 7
    assert a.waiting_time == 3


def test_block_hands_cpu_to_next_ready_process():
    res = simulate([_arrive(0, 4), _arrive(1, 2), _block(2, 3)], Policy.FCFS)
    procs = _by_pid(res)
    assert _slices(res) == [(1, 0, 2), (2, 2, 4), (1, 5, 7)]
    assert procs[2].completion_time == 4
    assert procs[2].waiting_time == 1
    assert procs[1].completion_time == 7


def test_block_request_on_finishing_process_completes_it():
    res = simulate([_arrive(0, 2), _arrive(0, 3), _block(2, 5)], Policy.FCFS)
    procs = _by_pid(res)
    assert procs[1].completion_time == 2
    assert procs[2].completion_time == 5
    assert _slices(res) == [(1, 0, 2), (2, 2, 5)]


def test_block_request_with_idle_cpu_is_ignored():
    res = simulate([_arrive(0, 1), _block(3, 4), _arrive(5, 2)], Policy.FCFS)
    procs = _by_pid(res)
    assert procs[2].completion_time == 7
    assert procs[2].waiting_time == 0


def test_idle_gap_between_arrivals():
    res = simulate([_arrive(0, 2), _arrive(5, 1)], Policy.FCFS)
    assert _slices(res) == [(1, 0, 2), (2, 5, 6)]
    assert res.system.makespan == 6
    assert res.system.cpu_utilization == pytest.approx(0.5)


def test_sjf_is_not_preemptive():
    res = simulate([_arrive(0, 5), _arrive(1, 4), _arrive(2, 1)], Policy.SJF)
    assert _slices(res) == [(1, 0, 5), (3, 5, 6), (2, 6, 10)]


def test_sjf_picks_shortest_of_simultaneous_arrivals():
    res = simulate([_arrive(0, 4), _arrive(0, 3)], Policy.SJF)
    procs = _by_pid(res)
    assert procs[2].completion_time == 3
    assert procs[1].completion_time == 7


def test_rr_expired_quantum_with_empty_queue_keeps_running():
    res = simulate([_arrive(0, 5)], Policy.RR, quantum=2)
    assert _slices(res) == [(1, 0, 5)]


def test_same_tick_unblocks_enter_ready_queue_in_blocked_order():
    events = [_arrive(0, 3), _arrive(0, 3), _arrive(0, 10), _block(1, 2), _block(1, 2)]
    res = simulate(events, Policy.FCFS)
    procs = _by_pid(res)
    assert procs[3].completion_time == 11
    assert procs[1].completion_time == 13
    assert procs[2].completion_time == 16


def test_srtn_same_tick_unblocks_cascade_preemption():
    events = [_arrive(0, 3), _arrive(0, 3), _arrive(0, 20), _block(1, 3), _block(3, 1)]
    res = simulate(events, Policy.SRTN)
    assert _slices(res) == [(1, 0, 1), (2, 1, 3), (3, 3, 4), (2, 4, 5), (1, 5, 7), (3, 7, 26)]
    procs = _by_pid(res)
    assert procs[2].completion_time == 5
    assert procs[1].completion_time == 7
    assert procs[3].completion_time == 26


@pytest.mark.parametrize("policy", list(Policy))
def test_every_process_completes_with_consistent_metrics(policy):
    table = ProcessTable.from_records(_mixed_workload())
    engine = SimulationEngine(table, policy, quantum=2)
    res = engine.run()

    for p in table:
        assert p.is_terminated
        assert p.remaining_time == 0

    for p in res.processes:
        assert p.turnaround_time == p.completion_time - p.arrival_time
        assert p.waiting_time == p.turnaround_time - p.burst_time
        assert p.response_time == p.start_time - p.arrival_time

    assert res.system.cpu_busy_time == sum(p.burst_time for p in table)
    assert engine.ready.is_empty()
    assert engine.blocked.is_empty()
    assert engine.running is None


def test_rr_response_never_exceeds_waiting():
    res = simulate(_mixed_workload(), Policy.RR, quantum=2)
    for p in res.processes:
        assert p.response_time <= p.waiting_time


def test_rr_with_large_quantum_matches_fcfs():
    events = [_arrive(0, 3), _arrive(1, 5), _arrive(2, 2), _arrive(4, 4), _arrive(6, 1)]
    fcfs = simulate(events, Policy.FCFS)
    rr = simulate(events, Policy.RR, quantum=5)

    def key(res):
        return [(p.pid, p.completion_time, p.waiting_time, p.turnaround_time) for p in res.processes]

    assert key(rr) == key(fcfs)


def test_same_input_gives_identical_report():
    first = format_report(simulate(_mixed_workload(), Policy.SRTN))
    second = format_report(simulate(_mixed_workload(), Policy.SRTN))
    assert first == second


def test_no_real_processes_averages_to_zero():
    res = simulate([_block(0, 2), _block(3, 1)], Policy.FCFS)
    assert res.processes == []
    assert res.system.avg_waiting == 0.0
    assert res.system.avg_turnaround == 0.0


def test_policy_is_parsed_from_identifier():
    res = simulate([_arrive(0, 1)], 3)
    assert res.policy is Policy.SRTN
    assert res.quantum is None


def test_invalid_policy_is_rejected():
    with pytest.raises(InvalidPolicy):
        simulate([_arrive(0, 1)], 5)


def test_round_robin_needs_a_quantum():
    with pytest.raises(InvalidQuantum):
        simulate([_arrive(0, 1)], Policy.RR)
    with pytest.raises(InvalidQuantum):
        simulate([_arrive(0, 1)], Policy.RR, quantum=0)


@pytest.mark.parametrize("events", [[_arrive(0, 0)], [_arrive(0, 2), _block(1, 0)], [_arrive(-1, 2)]])
def test_simulate_rejects_malformed_records(events):
    with pytest.raises(MalformedEvent):
        simulate(events, Policy.FCFS)


def test_remaining_time_starts_at_burst_time():
    table = ProcessTable.from_records([_arrive(0, 4)])
    (p,) = table.processes
    assert p.remaining_time == 4
