import pytest

from lobbyserver.services.lobbies import ReconnectSupervisor


def _supervisor(scheduler, fired):
    def on_expire(lobby_id, player_id, epoch):
        fired.append((lobby_id, player_id, epoch))
        return True
    return ReconnectSupervisor(30, on_expire, spawn=scheduler.spawn, sleep=scheduler.sleep)


def test_fires_after_grace_window(scheduler):
    fired = []
    supervisor = _supervisor(scheduler, fired)
    supervisor.schedule('AB12CD', 'a', 1)
    assert supervisor.pending('AB12CD', 'a') == 1
    assert fired == []
    scheduler.run_all()
    assert fired == [('AB12CD', 'a', 1)]
    assert supervisor.pending('AB12CD', 'a') is None


def test_cancelled_task_does_nothing(scheduler):
    fired = []
    supervisor = _supervisor(scheduler, fired)
    supervisor.schedule('AB12CD', 'a', 1)
    assert supervisor.cancel('AB12CD', 'a') == 1
    scheduler.run_all()
    assert fired == []
    assert len(supervisor) == 0


def test_superseded_task_is_stale(scheduler):
    fired = []
    supervisor = _supervisor(scheduler, fired)
    supervisor.schedule('AB12CD', 'a', 1)
    supervisor.cancel('AB12CD', 'a')
    supervisor.schedule('AB12CD', 'a', 2)
    scheduler.run_all()
    # only the second disconnect's task acts
    assert fired == [('AB12CD', 'a', 2)]


def test_sleeps_for_the_grace_window():
    slept = []
    tasks = []
    supervisor = ReconnectSupervisor(
        12.5, lambda *args: True,
        spawn=lambda target, *args: tasks.append((target, args)),
        sleep=slept.append,
    )
    supervisor.schedule('AB12CD', 'a', 7)
    target, args = tasks[0]
    target(*args)
    assert slept == [12.5]


def test_spawn_and_sleep_are_required():
    with pytest.raises(TypeError):
        ReconnectSupervisor(30, lambda *args: True)
