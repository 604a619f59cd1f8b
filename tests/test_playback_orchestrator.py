import random
from collections import Counter

import pytest

from soundcoin.core.playback import (
    AdSlot,
    PlaybackAction,
    PlaybackHooks,
    PlaybackOrchestrator,
    PlaybackState,
    RepeatMode,
)
from soundcoin.core.rewards import AdKind


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class RecordingHooks(PlaybackHooks):
    def __init__(self, ads=None):
        self.ads = ads or {}
        self.started_ads = []
        self.completed_ads = []
        self.started_tracks = []

    def pick_ad(self, kind):
        return self.ads.get(AdKind(kind))

    def ad_started(self, ad):
        self.started_ads.append(ad.ad_id)

    def ad_completed(self, ad, track_id, completed, coins):
        self.completed_ads.append((ad.ad_id, track_id, completed, coins))

    def track_started(self, track_id):
        self.started_tracks.append(track_id)


AUDIO_AD = AdSlot(ad_id=7, kind=AdKind.AUDIO, content_url="audio.mp3", duration=30)
VIDEO_AD = AdSlot(ad_id=8, kind=AdKind.VIDEO, content_url="video.mp4", duration=15)


def make_player(queue=None, hooks=None, clock=None, rng=None, **state_kwargs):
    state = PlaybackState(queue=queue or [11, 12, 13, 14, 15], **state_kwargs)
    return PlaybackOrchestrator(
        state,
        hooks=hooks or RecordingHooks({AdKind.AUDIO: AUDIO_AD, AdKind.VIDEO: VIDEO_AD}),
        ad_interval=3,
        rng=rng or random.Random(0),
        clock=clock or FakeClock(),
    )


class TestAdScheduling:
    def test_ad_plays_on_fourth_transition(self):
        hooks = RecordingHooks({AdKind.AUDIO: AUDIO_AD})
        player = make_player(hooks=hooks)

        assert player.start(0).track_id == 11
        assert player.on_media_ended().track_id == 12
        assert player.on_media_ended().track_id == 13

        decision = player.on_media_ended()

        assert decision.action == PlaybackAction.AD
        assert decision.ad == AUDIO_AD
        assert player.state.is_playing_ad is True
        # 포인터는 전진하지 않고 재생 예정 트랙을 기억
        assert player.state.current_index == 2
        assert player.state.resume_index == 3
        assert hooks.started_ads == [7]
        assert hooks.started_tracks == [11, 12, 13]

    def test_ad_completion_awards_and_resumes_next_track(self):
        clock = FakeClock()
        hooks = RecordingHooks({AdKind.AUDIO: AUDIO_AD})
        player = make_player(hooks=hooks, clock=clock)
        player.start(0)
        for _ in range(3):
            player.on_media_ended()

        clock.now += AUDIO_AD.duration
        decision = player.on_media_ended()

        assert decision.action == PlaybackAction.TRACK
        assert decision.track_id == 14
        assert decision.coins_awarded == 1
        assert hooks.completed_ads == [(7, 14, True, 1)]
        assert player.state.tracks_since_last_ad == 0
        assert player.state.is_playing_ad is False

    def test_video_mode_awards_three_coins(self):
        clock = FakeClock()
        player = make_player(clock=clock, ad_mode=AdKind.VIDEO)
        player.start(0)
        for _ in range(3):
            player.on_media_ended()

        clock.now += VIDEO_AD.duration
        decision = player.on_media_ended()

        assert decision.coins_awarded == 3

    def test_ad_ended_early_awards_nothing(self):
        clock = FakeClock()
        hooks = RecordingHooks({AdKind.AUDIO: AUDIO_AD})
        player = make_player(hooks=hooks, clock=clock)
        player.start(0)
        for _ in range(3):
            player.on_media_ended()

        clock.now += 5
        decision = player.on_media_ended()

        assert decision.coins_awarded == 0
        assert hooks.completed_ads == [(7, 14, False, 0)]
        assert decision.track_id == 14

    def test_no_ad_available_resets_counter(self):
        hooks = RecordingHooks()
        player = make_player(hooks=hooks)
        player.start(0)
        for _ in range(2):
            player.on_media_ended()

        decision = player.on_media_ended()

        assert decision.action == PlaybackAction.TRACK
        assert decision.track_id == 14
        assert player.state.tracks_since_last_ad == 0
        assert hooks.started_ads == []

    def test_skips_do_not_count_toward_ads(self):
        hooks = RecordingHooks({AdKind.AUDIO: AUDIO_AD})
        player = make_player(hooks=hooks, repeat=RepeatMode.ALL)
        player.start(0)

        for _ in range(6):
            assert player.skip_next().action == PlaybackAction.TRACK

        assert player.state.tracks_since_last_ad == 0
        assert hooks.started_ads == []

    def test_skip_during_ad_records_incomplete_view_and_resumes(self):
        clock = FakeClock()
        hooks = RecordingHooks({AdKind.AUDIO: AUDIO_AD})
        player = make_player(hooks=hooks, clock=clock)
        player.start(0)
        for _ in range(3):
            player.on_media_ended()

        # 광고 길이를 넘겨도 스킵은 완료가 아님
        clock.now += AUDIO_AD.duration
        decision = player.skip_next()

        assert decision.action == PlaybackAction.TRACK
        assert decision.track_id == 14
        assert decision.coins_awarded == 0
        assert hooks.completed_ads == [(7, 14, False, 0)]
        assert player.state.tracks_since_last_ad == 0
        assert player.state.is_playing_ad is False

        # 카운터가 리셋되었으므로 다음 곡에서 광고가 다시 나오지 않음
        assert player.on_media_ended().action == PlaybackAction.TRACK
        assert hooks.started_ads == [7]

    def test_skip_previous_during_ad_resumes_pending_track(self):
        hooks = RecordingHooks({AdKind.AUDIO: AUDIO_AD})
        player = make_player(hooks=hooks)
        player.start(0)
        for _ in range(3):
            player.on_media_ended()

        decision = player.skip_previous()

        assert decision.track_id == 14
        assert hooks.completed_ads == [(7, 14, False, 0)]

    def test_jump_during_ad_plays_requested_track(self):
        hooks = RecordingHooks({AdKind.AUDIO: AUDIO_AD})
        player = make_player(hooks=hooks)
        player.start(0)
        for _ in range(3):
            player.on_media_ended()

        decision = player.start(0)

        assert decision.action == PlaybackAction.TRACK
        assert decision.track_id == 11
        assert hooks.completed_ads == [(7, 14, False, 0)]
        assert player.state.tracks_since_last_ad == 0

    def test_ad_mode_change_applies_to_next_slot(self):
        player = make_player()
        player.start(0)
        player.set_ad_mode(AdKind.VIDEO)
        for _ in range(2):
            player.on_media_ended()

        decision = player.on_media_ended()

        assert decision.ad == VIDEO_AD


class TestQueueNavigation:
    def test_stops_at_end_without_repeat(self):
        player = make_player(queue=[1, 2], hooks=RecordingHooks())
        player.start(0)
        player.on_media_ended()

        decision = player.on_media_ended()

        assert decision.action == PlaybackAction.STOPPED
        assert player.state.is_playing is False

    def test_ended_reports_after_stop_do_not_count(self):
        player = make_player(queue=[1, 2], hooks=RecordingHooks())
        player.start(0)
        player.on_media_ended()
        player.on_media_ended()
        counter = player.state.tracks_since_last_ad

        for _ in range(5):
            assert player.on_media_ended().action == PlaybackAction.STOPPED

        assert player.state.tracks_since_last_ad == counter

    def test_repeat_all_wraps(self):
        player = make_player(queue=[1, 2], hooks=RecordingHooks(), repeat=RepeatMode.ALL)
        player.start(1)

        assert player.on_media_ended().track_id == 1

    def test_repeat_one_replays_current(self):
        player = make_player(queue=[1, 2], hooks=RecordingHooks(), repeat=RepeatMode.ONE)
        player.start(1)

        assert player.on_media_ended().track_id == 2
        assert player.on_media_ended().track_id == 2

    def test_skip_previous_wraps_only_with_repeat_all(self):
        player = make_player(queue=[1, 2, 3], hooks=RecordingHooks())
        player.start(0)
        assert player.skip_previous().track_id == 1

        player.cycle_repeat()
        assert player.state.repeat == RepeatMode.ALL
        assert player.skip_previous().track_id == 3

    def test_skip_next_at_end_without_repeat_stays(self):
        player = make_player(queue=[1, 2], hooks=RecordingHooks())
        player.start(1)

        decision = player.skip_next()

        assert decision.track_id == 2
        assert player.state.current_index == 1

    def test_cycle_repeat_order(self):
        player = make_player()
        assert player.cycle_repeat() == RepeatMode.ALL
        assert player.cycle_repeat() == RepeatMode.ONE
        assert player.cycle_repeat() == RepeatMode.NONE

    def test_toggle_shuffle(self):
        player = make_player()
        assert player.toggle_shuffle() is True
        assert player.toggle_shuffle() is False

    def test_empty_queue_stops(self):
        player = make_player(queue=[], hooks=RecordingHooks())
        player.state.queue = []
        assert player.start(0).action == PlaybackAction.STOPPED

    def test_out_of_range_index_rejected(self):
        player = make_player(queue=[1, 2])
        with pytest.raises(ValueError):
            player.start(5)

    def test_current_does_not_change_state(self):
        hooks = RecordingHooks()
        player = make_player(hooks=hooks)
        player.start(2)

        decision = player.current()

        assert decision.track_id == 13
        assert hooks.started_tracks == [13]


class TestShuffle:
    def test_shuffle_is_uniform_with_seeded_rng(self):
        queue = [1, 2, 3, 4]
        player = PlaybackOrchestrator(
            PlaybackState(queue=queue, shuffle=True),
            hooks=RecordingHooks(),
            ad_interval=10**9,
            rng=random.Random(1234),
        )
        player.start(0)

        counts = Counter(player.on_media_ended().track_id for _ in range(4000))

        assert set(counts) == set(queue)
        for track_id in queue:
            assert 850 <= counts[track_id] <= 1150

    def test_shuffle_may_repeat_current_track(self):
        player = PlaybackOrchestrator(
            PlaybackState(queue=[1, 2], shuffle=True),
            hooks=RecordingHooks(),
            ad_interval=10**9,
            rng=random.Random(7),
        )
        player.start(0)

        picks = [player.on_media_ended().track_id for _ in range(50)]
        repeats = sum(1 for prev, cur in zip(picks, picks[1:]) if prev == cur)

        assert repeats > 0
