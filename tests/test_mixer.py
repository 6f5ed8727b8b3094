"""Tests for the BoomBox facade."""

import json
import logging

import pytest

from boombox import BoomBox, BoomBoxConfig, MemoryStore, PlayParams
from boombox.errors import InvalidArgumentError, NotFoundError, PlaybackError
from boombox.testing import MockConfig, MockEngine


def played(engine) -> list[str]:
    return [c.sound_id for c in engine.calls_for("sound.play")]


class TestChannels:
    """Tests for add_channel / get_channel_volume."""

    def test_default_volume(self, boombox):
        boombox.add_channel("music", 80)
        assert boombox.get_channel_volume("music") == 80
        assert boombox.channels() == ["music"]
        assert boombox.members("music") == []

    def test_add_twice_keeps_first(self, boombox):
        boombox.add_channel("music", 80)
        boombox.add_channel("music", 20)
        assert boombox.get_channel_volume("music") == 80

    def test_stored_volume_wins(self, engine, scheduler):
        store = MemoryStore({"boomBox": json.dumps({"music": {"volume": 35}})})
        boombox = BoomBox(engine, scheduler=scheduler, store=store)

        boombox.add_channel("music", 80)

        assert boombox.get_channel_volume("music") == 35

    def test_unknown_channel_volume_is_zero(self, boombox):
        assert boombox.get_channel_volume("nowhere") == 0

    def test_bad_default_volume(self, boombox, caplog):
        with caplog.at_level(logging.ERROR, logger="boombox"):
            boombox.add_channel("music", 150)
        assert "music" not in boombox.channels()
        assert "between 0 and 100" in caplog.text

    def test_members_of_unknown_channel(self, boombox):
        assert boombox.members("nowhere") is None


class TestSetVolume:
    """Tests for set_volume()."""

    def test_sets_persists_and_applies(self, music, scheduler, engine, store):
        music.play("music", "t1")
        scheduler.run_until_idle()

        music.set_volume("music", 60)

        assert music.get_channel_volume("music") == 60
        assert engine.sound("t1").volume == 60
        assert json.loads(store.get("boomBox")) == {"music": {"volume": 60}}

    @pytest.mark.parametrize("volume", [-1, 101, "60", True])
    def test_out_of_range_is_rejected(self, music, store, volume):
        music.set_volume("music", volume)

        assert music.get_channel_volume("music") == 80
        assert store.get("boomBox") is None

    def test_unknown_channel(self, strict_boombox, store):
        with pytest.raises(NotFoundError):
            strict_boombox.set_volume("nowhere", 50)
        assert store.get("boomBox") is None

    def test_float_volume(self, music):
        music.set_volume("music", 42.5)
        assert music.get_channel_volume("music") == 42.5


class TestAdd:
    """Tests for add()."""

    def test_registers_idle_at_zero(self, boombox, engine):
        boombox.add("click", "click.wav")

        call = engine.calls_for("create_sound")[0]
        assert call.args == ("click", "click.wav")
        assert call.kwargs == {"volume": 0, "autoplay": False, "autoload": False}
        assert boombox.sound("click").volume == 0
        assert not boombox.is_playing("click")

    def test_duplicate_is_ignored(self, boombox, engine):
        boombox.add("click", "click.wav")
        boombox.add("click", "other.wav")

        assert engine.call_count("create_sound") == 1
        assert boombox.sound("click").url == "click.wav"


class TestPlay:
    """Tests for play()."""

    def test_fades_in_to_channel_volume(self, music, scheduler, engine):
        music.play("music", "t1")

        assert music.members("music") == ["t1"]
        assert engine.sound("t1").playing
        assert engine.sound("t1").volume == 0

        scheduler.advance(250)
        assert engine.sound("t1").volume == 40

        scheduler.run_until_idle()
        assert engine.sound("t1").volume == 80

    def test_cross_fade(self, music, scheduler, engine):
        music.play("music", "t1")
        scheduler.run_until_idle()

        music.play("music", "t2")
        scheduler.advance(250)
        assert music.members("music") == ["t1", "t2"]
        assert engine.sound("t1").volume == 40
        assert engine.sound("t2").volume == 40

        scheduler.run_until_idle()
        assert music.members("music") == ["t2"]
        assert not engine.sound("t1").playing
        assert engine.sound("t1").volume == 0
        assert engine.sound("t2").volume == 80
        assert music.sound("t1").channel is None

    def test_keep_others_playing(self, music, scheduler):
        music.play("music", "t1")
        music.play("music", "t2", stop_all=False)
        scheduler.run_until_idle()

        assert music.members("music") == ["t1", "t2"]

    def test_playing_sound_is_not_restarted(self, music, scheduler, engine):
        music.play("music", "t1")
        scheduler.run_until_idle()

        music.play("music", "t1", volume=30)
        scheduler.run_until_idle()

        assert played(engine) == ["t1"]
        assert engine.sound("t1").play_count == 1
        assert engine.sound("t1").volume == 30

    def test_explicit_volume(self, music, scheduler, engine):
        music.play("music", "t1", volume=30)
        scheduler.run_until_idle()
        assert engine.sound("t1").volume == 30

    def test_zero_volume_is_honored(self, music, scheduler, engine):
        music.play("music", "t1", volume=0)
        scheduler.run_until_idle()

        assert engine.sound("t1").volume == 0
        assert music.is_playing("t1")

    def test_no_transition(self, music, engine):
        music.play("music", "t1", transition="none")
        assert engine.sound("t1").volume == 80

    def test_params_object_and_mapping(self, music, scheduler):
        music.play("music", "t1", PlayParams(start_time=0))
        music.play("music", "t2", {"stopAll": False, "startTime": 0})

        assert music.members("music") == ["t1", "t2"]
        assert scheduler.pending == 0

    def test_several_sounds(self, music, scheduler, engine):
        music.play("music", ["t1", "t2", "t1"])
        scheduler.run_until_idle()

        assert music.members("music") == ["t1", "t2"]
        assert played(engine) == ["t1", "t2"]

    def test_restart_seeks_to_start(self, music, engine):
        music.play("music", "t1", restart=True)
        assert engine.calls_for("sound.set_position")[0].args == ("t1", 0)

    def test_unknown_channel(self, music, engine, caplog):
        with caplog.at_level(logging.ERROR, logger="boombox"):
            music.play("sfx", "t1")

        assert "unknown channel sfx" in caplog.text
        assert played(engine) == []
        assert not music.is_playing("t1")

    def test_unknown_sound(self, music, engine, caplog):
        with caplog.at_level(logging.ERROR, logger="boombox"):
            music.play("music", "nope")

        assert "the sound nope does not exist." in caplog.text
        assert played(engine) == []

    def test_unknown_sound_in_batch_starts_nothing(self, strict_boombox, engine):
        strict_boombox.add_channel("music", 80)
        strict_boombox.add("t1", "track1.ogg")

        with pytest.raises(NotFoundError) as exc:
            strict_boombox.play("music", ["t1", "nope"])

        assert exc.value.name == "nope"
        assert played(engine) == []

    def test_path_registers_unknown_sound(self, music, scheduler, engine):
        music.play("music", "intro", path="intro.ogg")
        scheduler.run_until_idle()

        assert music.sound("intro").url == "intro.ogg"
        assert music.members("music") == ["intro"]

    def test_bad_transition(self, strict_boombox, engine):
        strict_boombox.add_channel("music", 80)
        strict_boombox.add("t1", "track1.ogg")

        with pytest.raises(InvalidArgumentError):
            strict_boombox.play("music", "t1", transition="wobble")
        with pytest.raises(InvalidArgumentError):
            strict_boombox.play("music", "t1", stop_transition="wobble")
        assert played(engine) == []

    def test_unknown_option(self, strict_boombox):
        strict_boombox.add_channel("music", 80)
        with pytest.raises(InvalidArgumentError):
            strict_boombox.play("music", "t1", shuffle=True)

    def test_move_between_channels(self, music, scheduler):
        music.add_channel("sfx", 50)
        music.play("music", "t1")
        scheduler.run_until_idle()

        music.play("sfx", "t1")
        scheduler.run_until_idle()

        assert music.members("music") == []
        assert music.members("sfx") == ["t1"]
        assert music.sound("t1").volume == 50
        assert music.sound("t1").channel == "sfx"


class TestPlaybackEnd:
    """Natural end, looping and stopping."""

    def test_finish_releases(self, music, scheduler, engine):
        music.play("music", "t1")
        scheduler.run_until_idle()

        engine.sound("t1").finish()

        assert music.members("music") == []
        assert engine.sound("t1").volume == 0
        assert music.sound("t1").channel is None

    def test_loop_replays(self, music, scheduler, engine):
        music.play("music", "t1", loop=True)
        scheduler.run_until_idle()

        engine.sound("t1").finish()
        engine.sound("t1").finish()

        assert music.members("music") == ["t1"]
        assert engine.sound("t1").play_count == 3
        assert engine.sound("t1").volume == 80

    def test_looping_sound_can_be_stopped(self, music, scheduler, engine):
        music.play("music", "t1", loop=True)
        scheduler.run_until_idle()
        engine.sound("t1").finish()

        music.stop("t1")
        scheduler.run_until_idle()

        assert music.members("music") == []
        assert not engine.sound("t1").playing

    def test_stop_fades_out(self, music, scheduler, engine):
        music.play("music", "t1")
        scheduler.run_until_idle()

        music.stop("t1", time=200)
        scheduler.advance(100)
        assert engine.sound("t1").volume == 40
        assert music.is_playing("t1")

        scheduler.run_until_idle()
        assert engine.calls_for("sound.stop")[0].sound_id == "t1"
        assert not music.is_playing("t1")

    def test_stop_idle_and_unknown_sounds(self, music, scheduler, engine):
        music.stop(["t1", "nope"])
        scheduler.run_until_idle()
        assert engine.calls_for("sound.stop") == []

    def test_stop_channel(self, music, scheduler):
        music.play("music", ["t1", "t2"])
        scheduler.run_until_idle()

        music.stop_channel("music", transition="none")

        assert music.members("music") == []

    def test_stop_unknown_channel(self, strict_boombox):
        with pytest.raises(NotFoundError):
            strict_boombox.stop_channel("nowhere")

    def test_replay_during_fade_out(self, music, scheduler, engine):
        music.play("music", "t1")
        scheduler.run_until_idle()

        music.stop("t1")
        scheduler.advance(200)
        music.play("music", "t1")
        scheduler.run_until_idle()

        assert music.members("music") == ["t1"]
        assert engine.sound("t1").playing
        assert engine.sound("t1").volume == 80


class TestMute:
    """Tests for channel and engine-wide muting."""

    def test_mute_and_unmute(self, music, scheduler, engine):
        music.play("music", "t1")
        scheduler.run_until_idle()

        music.mute("music")
        scheduler.run_until_idle()
        assert engine.sound("t1").volume == 0
        assert music.members("music") == ["t1"]
        assert engine.sound("t1").playing

        music.unmute("music")
        scheduler.run_until_idle()
        assert engine.sound("t1").volume == 80

    def test_unmute_uses_current_channel_volume(self, music, scheduler, engine):
        music.play("music", "t1")
        music.mute("music", time=0)
        music.set_volume("music", 30)
        music.mute("music", time=0)

        music.unmute("music", time=0)

        assert engine.sound("t1").volume == 30

    def test_mute_unknown_channel(self, strict_boombox):
        with pytest.raises(NotFoundError):
            strict_boombox.mute("nowhere")

    def test_toggle_mute_all(self, boombox, engine):
        assert not boombox.is_muted()

        boombox.toggle_mute_all()
        assert boombox.is_muted()
        assert engine.last_call.method == "mute"

        boombox.toggle_mute_all()
        assert not boombox.is_muted()
        assert engine.last_call.method == "unmute"

    def test_mute_all(self, boombox):
        boombox.mute_all()
        assert boombox.is_muted()
        boombox.unmute_all()
        assert not boombox.is_muted()


class TestReadiness:
    """Calls made before the engine is ready are replayed in order."""

    def test_calls_wait_for_engine(self, pending_boombox, engine):
        pending_boombox.add_channel("ch", 50)
        pending_boombox.add("a", "a.ogg")
        pending_boombox.play("ch", "a")

        assert not pending_boombox.is_ready
        assert [c.method for c in engine.calls] == ["setup"]

    def test_replay_order(self, pending_boombox, engine):
        pending_boombox.add_channel("ch", 50)
        pending_boombox.add("a", "a.ogg")
        pending_boombox.play("ch", "a")
        pending_boombox.add("b", "b.ogg")

        engine.signal_ready()

        calls = [(c.method, c.sound_id) for c in engine.calls if c.method != "setup"]
        assert calls == [
            ("create_sound", "a"),
            ("sound.play", "a"),
            ("create_sound", "b"),
        ]
        assert pending_boombox.is_ready

    def test_replayed_play_keeps_params(self, pending_boombox, engine, scheduler):
        pending_boombox.add_channel("ch", 50)
        pending_boombox.add("a", "a.ogg")
        pending_boombox.play("ch", "a", volume=30, loop=True)

        engine.signal_ready()
        scheduler.run_until_idle()
        engine.sound("a").finish()

        assert engine.sound("a").volume == 30
        assert pending_boombox.members("ch") == ["a"]
        assert engine.sound("a").play_count == 2

    def test_play_with_path_before_ready(self, pending_boombox, engine):
        pending_boombox.add_channel("ch", 50)
        pending_boombox.play("ch", "a", path="a.ogg")

        engine.signal_ready()

        assert pending_boombox.members("ch") == ["a"]

    def test_unknown_sound_before_ready_is_dropped(self, pending_boombox, engine):
        pending_boombox.add_channel("ch", 50)
        pending_boombox.play("ch", "a")

        engine.signal_ready()

        assert engine.calls_for("sound.play") == []

    def test_failed_command_does_not_block_the_rest(self, scheduler, caplog):
        from boombox.testing import MockConfig, MockEngine

        engine = MockEngine(MockConfig(fail_on_create={"a"}))
        boombox = BoomBox(engine, scheduler=scheduler)
        boombox.add("a", "a.ogg")
        boombox.add("b", "b.ogg")

        with caplog.at_level(logging.ERROR, logger="boombox"):
            engine.signal_ready()

        assert boombox.sound("a") is None
        assert boombox.sound("b") is not None
        assert "AddSound failed" in caplog.text


class TestErrorPolicy:
    """Failures are logged, or raised with raise_errors=True."""

    def test_logged_by_default(self, boombox, caplog):
        with caplog.at_level(logging.ERROR, logger="boombox"):
            assert boombox.play("nowhere", "x") is None
        assert caplog.records[-1].levelno == logging.ERROR

    def test_raised_when_configured(self, engine, scheduler):
        boombox = BoomBox(engine, scheduler=scheduler, config=BoomBoxConfig(raise_errors=True))
        engine.signal_ready()
        with pytest.raises(NotFoundError):
            boombox.play("nowhere", "x")


class TestEngineFailures:
    """The engine rejects a sound: nothing is registered or bound."""

    @pytest.fixture
    def mock_config(self):
        return MockConfig(fail_on_create={"broken"})

    @pytest.fixture
    def failing(self, mock_config, scheduler):
        engine = MockEngine(mock_config)
        boombox = BoomBox(engine, scheduler=scheduler)
        engine.signal_ready()
        boombox.add_channel("music", 80)
        boombox.add("t1", "track1.ogg")
        boombox.add("t2", "track2.ogg")
        return boombox

    def test_add_after_ready(self, failing, caplog):
        with caplog.at_level(logging.ERROR, logger="boombox"):
            assert failing.add("broken", "broken.ogg") is None

        assert failing.sound("broken") is None
        assert "Could not create the sound broken" in caplog.text

    def test_add_after_ready_strict(self, scheduler):
        engine = MockEngine(MockConfig(fail_on_create={"broken"}))
        boombox = BoomBox(engine, scheduler=scheduler, config=BoomBoxConfig(raise_errors=True))
        engine.signal_ready()

        with pytest.raises(PlaybackError) as exc:
            boombox.add("broken", "broken.ogg")

        assert exc.value.sound_id == "broken"
        assert exc.value.operation == "create"
        assert isinstance(exc.value.__cause__, RuntimeError)
        assert boombox.sound("broken") is None

    def test_play_with_path(self, failing, scheduler, caplog):
        with caplog.at_level(logging.ERROR, logger="boombox"):
            failing.play("music", "broken", path="broken.ogg")

        assert failing.sound("broken") is None
        assert failing.members("music") == []
        assert scheduler.pending == 0

    def test_play_failure_leaves_sound_idle(self, failing, mock_config, scheduler, caplog):
        mock_config.fail_on_play.add("t1")

        with caplog.at_level(logging.ERROR, logger="boombox"):
            failing.play("music", "t1")

        assert failing.members("music") == []
        assert not failing.is_playing("t1")
        assert failing.sound("t1").channel is None
        assert scheduler.pending == 0
        assert "Could not play the sound t1" in caplog.text

    def test_play_failure_strict(self, scheduler):
        engine = MockEngine(MockConfig(fail_on_play={"t1"}))
        boombox = BoomBox(engine, scheduler=scheduler, config=BoomBoxConfig(raise_errors=True))
        engine.signal_ready()
        boombox.add_channel("music", 80)
        boombox.add("t1", "track1.ogg")

        with pytest.raises(PlaybackError) as exc:
            boombox.play("music", "t1")

        assert exc.value.operation == "play"
        assert boombox.members("music") == []

    def test_failed_swap_keeps_current_track(self, failing, mock_config, scheduler):
        failing.play("music", "t1")
        scheduler.run_until_idle()
        mock_config.fail_on_play.add("t2")

        failing.play("music", "t2")
        scheduler.run_until_idle()

        assert failing.members("music") == ["t1"]
        assert failing.sound("t1").volume == 80
        assert not failing.is_playing("t2")

    def test_batch_starts_the_playable_sounds(self, failing, mock_config, scheduler, caplog):
        mock_config.fail_on_play.add("t1")

        with caplog.at_level(logging.ERROR, logger="boombox"):
            failing.play("music", ["t1", "t2"])
        scheduler.run_until_idle()

        assert failing.members("music") == ["t2"]
        assert failing.sound("t2").volume == 80
        assert "Could not play the sound t1" in caplog.text

    def test_failed_loop_replay_releases(self, failing, mock_config, scheduler, caplog):
        failing.play("music", "t1", loop=True)
        scheduler.run_until_idle()
        mock_config.fail_on_play.add("t1")

        with caplog.at_level(logging.ERROR, logger="boombox"):
            failing.engine.sound("t1").finish()

        assert failing.members("music") == []
        assert failing.sound("t1").channel is None
        assert failing.sound("t1").volume == 0
        assert "Could not replay the sound t1" in caplog.text


class TestClose:
    def test_close_cancels_fades(self, music, scheduler, engine):
        music.play("music", "t1")
        music.close()

        assert scheduler.run_until_idle() == 0
        assert engine.closed
