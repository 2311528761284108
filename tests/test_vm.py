"""Tests for the interpreter core."""

import logging

import pytest
from chip8 import VM, LoadError, MemoryAccessError, StackOverflow, StackUnderflow
from chip8.cpu import Mode
from chip8.vm import MAX_DIAGNOSTICS


class TestStep:
    """Fetch, decode, execute and PC movement."""

    def test_plain_instruction_advances_two(self, make_vm):
        """A non-branching instruction moves PC by 2."""
        vm = make_vm(0x6001)
        instr = vm.step()
        assert instr.mnemonic == "LD_BYTE"
        assert vm.machine.cpu.pc == 0x202
        assert vm.steps == 1

    def test_unsatisfied_skip_advances_two(self, make_vm):
        """A skip whose condition fails behaves like a plain instruction."""
        vm = make_vm(0x3001)
        vm.step()
        assert vm.machine.cpu.pc == 0x202

    def test_call_and_return(self, make_vm):
        """RET resumes after the CALL."""
        vm = make_vm(0x2206, 0x6105, 0x1204, 0x00EE)
        vm.step()
        assert vm.machine.cpu.pc == 0x206
        vm.step()
        assert vm.machine.cpu.pc == 0x202
        vm.step()
        assert vm.machine.cpu.v[1] == 5
        assert vm.machine.cpu.sp == 0

    def test_clear_screen(self, make_vm):
        """00E0 blanks a drawn screen."""
        vm = make_vm(0xD015, 0x00E0)
        vm.step()
        assert sum(map(sum, vm.machine.display.snapshot())) > 0
        vm.step()
        assert sum(map(sum, vm.machine.display.snapshot())) == 0


class TestUnknownOpcode:
    """Unrecognized words are reported and skipped."""

    def test_unknown_is_noop(self, make_vm, caplog):
        """PC advances and a diagnostic is recorded."""
        vm = make_vm(0x5121, 0x6007)
        with caplog.at_level(logging.WARNING, logger="chip8.vm"):
            instr = vm.step()
        assert instr.mnemonic is None
        assert vm.machine.cpu.pc == 0x202
        assert vm.diagnostics == ["Unknown opcode 5121 at 0x200"]
        assert "Unknown opcode 5121" in caplog.text
        vm.step()
        assert vm.machine.cpu.v[0] == 7

    def test_repeated_site_reported_once(self, make_vm):
        """A loop over a bad word logs it once but counts every fetch."""
        vm = make_vm(0x5121, 0x1200)
        for _ in range(20000):
            vm.step()
        assert vm.diagnostics == ["Unknown opcode 5121 at 0x200"]
        assert vm.unknown_opcodes == 10000

    def test_diagnostics_are_bounded(self, make_vm):
        """Distinct bad sites stop being recorded past the limit."""
        vm = make_vm(*([0x5121] * (MAX_DIAGNOSTICS + 50)))
        for _ in range(MAX_DIAGNOSTICS + 50):
            vm.step()
        assert len(vm.diagnostics) == MAX_DIAGNOSTICS
        assert vm.unknown_opcodes == MAX_DIAGNOSTICS + 50


class TestKeyWait:
    """Fx0A blocking key wait."""

    def test_idles_until_key(self, make_vm):
        """State is unchanged cycle to cycle until a key is pressed."""
        vm = make_vm(0xF30A, 0x6001)
        vm.step()
        assert vm.awaiting_key
        assert vm.machine.cpu.mode is Mode.AWAITING_KEY
        before = vm.get_state()
        memory = vm.machine.memory.snapshot()
        for _ in range(50):
            assert vm.step() is None
        assert vm.get_state() == before
        assert vm.machine.memory.snapshot() == memory

        vm.set_key(0xB, True)
        vm.step()
        assert vm.machine.cpu.v[3] == 0xB
        assert vm.machine.cpu.pc == 0x202
        assert not vm.awaiting_key

        vm.step()
        assert vm.machine.cpu.v[0] == 1

    def test_wait_counts_as_one_step(self, make_vm):
        """A blocking wait and its completion are a single step."""
        vm = make_vm(0xF00A)
        vm.step()
        vm.step()
        vm.step()
        vm.set_key(2, True)
        vm.step()
        assert vm.machine.cpu.v[0] == 2
        assert vm.steps == 1

    def test_lowest_key_wins(self, make_vm):
        """With several keys down the lowest index is stored."""
        vm = make_vm(0xF00A)
        vm.set_key(9, True)
        vm.set_key(4, True)
        vm.step()
        assert vm.machine.cpu.v[0] == 4

    def test_timers_still_run_while_waiting(self, make_vm):
        """Waiting does not stop the delay timer."""
        vm = make_vm(0xF00A)
        vm.machine.timers.set_delay(5)
        vm.step()
        vm.tick_timers()
        assert vm.machine.timers.delay_timer == 4


class TestTiming:
    """Timers are decoupled from instruction throughput."""

    def test_many_cycles_one_tick(self, make_vm):
        """10,000 cycles inside one tick lower each timer by exactly one."""
        vm = make_vm(0x1200)
        vm.machine.timers.set_delay(10)
        vm.machine.timers.set_sound(10)
        for _ in range(10000):
            vm.step()
        assert vm.machine.timers.delay_timer == 10
        vm.tick_timers()
        assert vm.machine.timers.delay_timer == 9
        assert vm.machine.timers.sound_timer == 9

    def test_advance_time(self, make_vm):
        """Wall time converts to ticks at 60 Hz."""
        vm = make_vm(0x1200)
        vm.machine.timers.set_sound(3)
        assert vm.advance_time(0.5) == 30
        assert vm.machine.timers.sound_timer == 0
        assert vm.tone_active is False


class TestFaults:
    """Stack and memory faults halt with context."""

    def test_return_on_empty_stack(self, make_vm):
        """RET with nothing to return to raises and leaves PC alone."""
        vm = make_vm(0x00EE)
        with pytest.raises(StackUnderflow) as excinfo:
            vm.step()
        assert excinfo.value.pc == 0x200
        assert excinfo.value.step == 1
        assert excinfo.value.opcode == 0x00EE
        assert vm.machine.cpu.pc == 0x200

    def test_recursive_call_overflows(self, make_vm):
        """The 17th nested CALL raises."""
        vm = make_vm(0x2200)
        for _ in range(16):
            vm.step()
        with pytest.raises(StackOverflow):
            vm.step()
        assert vm.machine.cpu.sp == 16
        assert vm.machine.cpu.pc == 0x200

    def test_sprite_read_past_memory(self, make_vm):
        """A sprite running off the end of memory faults before drawing."""
        vm = make_vm(0xD005)
        vm.machine.cpu.set_i(0xFFE)
        with pytest.raises(MemoryAccessError):
            vm.step()
        assert sum(map(sum, vm.machine.display.snapshot())) == 0

    def test_bulk_store_past_memory(self, make_vm):
        """Fx55 past the last byte writes nothing."""
        vm = make_vm(0xF355)
        vm.machine.cpu.set_i(0xFFE)
        with pytest.raises(MemoryAccessError):
            vm.step()
        assert vm.machine.memory.read(0xFFE) == 0

    def test_fetch_past_memory(self, make_vm):
        """Jumping off the end of memory faults on the next fetch."""
        vm = make_vm(0x1FFF)
        vm.step()
        with pytest.raises(MemoryAccessError) as excinfo:
            vm.step()
        assert excinfo.value.pc == 0xFFF
        assert excinfo.value.opcode is None

    def test_error_info(self, make_vm):
        """Errors convert to structured info."""
        vm = make_vm(0x00EE)
        with pytest.raises(StackUnderflow) as excinfo:
            vm.step()
        info = excinfo.value.to_error_info().to_dict()
        assert info["type"] == "StackUnderflow"
        assert info["pc"] == 0x200
        assert info["opcode"] == 0x00EE


class TestLifecycle:
    """Loading and reset."""

    def test_load_file(self, tmp_path, assemble):
        """ROM files load at 0x200."""
        path = tmp_path / "jump.ch8"
        path.write_bytes(assemble(0x1234))
        vm = VM()
        vm.load_file(path)
        vm.step()
        assert vm.machine.cpu.pc == 0x234

    def test_load_rejects_oversized(self):
        """Oversized ROMs raise before anything runs."""
        vm = VM()
        with pytest.raises(LoadError):
            vm.load(bytes(4000))
        assert vm.get_state()["pc"] == 0x200
        assert vm.machine.memory.snapshot() == [0] * 4096

    def test_reset(self, make_vm):
        """Reset restores the power-on state."""
        vm = make_vm(0x6001, 0x5121)
        vm.step()
        vm.step()
        vm.set_key(1, True)
        vm.reset()
        assert vm.steps == 0
        assert vm.diagnostics == []
        assert vm.machine.cpu.pc == 0x200
        assert vm.machine.memory.snapshot() == [0] * 4096
        assert vm.machine.keypad.first_pressed() is None
