"""Instruction decoding and execution for the CHIP-8 virtual machine."""

from dataclasses import dataclass
from typing import Callable, Optional

from .loader import glyph_address
from .machine import Machine


@dataclass(frozen=True)
class Instruction:
    """A decoded 16-bit instruction word and its operand fields."""
    word: int
    addr: int
    mnemonic: Optional[str]

    @property
    def family(self) -> int:
        return self.word >> 12

    @property
    def nnn(self) -> int:
        return self.word & 0x0FFF

    @property
    def n(self) -> int:
        return self.word & 0x000F

    @property
    def x(self) -> int:
        return (self.word >> 8) & 0xF

    @property
    def y(self) -> int:
        return (self.word >> 4) & 0xF

    @property
    def kk(self) -> int:
        return self.word & 0x00FF

    @property
    def known(self) -> bool:
        return self.mnemonic is not None


_FAMILIES = {
    0x1: "JP",
    0x2: "CALL",
    0x3: "SE_BYTE",
    0x4: "SNE_BYTE",
    0x6: "LD_BYTE",
    0x7: "ADD_BYTE",
    0xA: "LD_I",
    0xB: "JP_V0",
    0xC: "RND",
    0xD: "DRW",
}

_ALU = {
    0x0: "LD_REG",
    0x1: "OR",
    0x2: "AND",
    0x3: "XOR",
    0x4: "ADD_REG",
    0x5: "SUB",
    0x6: "SHR",
    0x7: "SUBN",
    0xE: "SHL",
}

_KEYS = {
    0x9E: "SKP",
    0xA1: "SKNP",
}

_MISC = {
    0x07: "LD_VX_DT",
    0x0A: "LD_K",
    0x15: "LD_DT",
    0x18: "LD_ST",
    0x1E: "ADD_I",
    0x29: "LD_F",
    0x33: "LD_B",
    0x55: "LD_MEM",
    0x65: "LD_REGS",
}


def _mnemonic(word: int) -> Optional[str]:
    family = word >> 12
    if family == 0x0:
        if word == 0x00E0:
            return "CLS"
        if word == 0x00EE:
            return "RET"
        return "SYS"
    if family == 0x5:
        return "SE_REG" if word & 0xF == 0 else None
    if family == 0x9:
        return "SNE_REG" if word & 0xF == 0 else None
    if family == 0x8:
        return _ALU.get(word & 0xF)
    if family == 0xE:
        return _KEYS.get(word & 0xFF)
    if family == 0xF:
        return _MISC.get(word & 0xFF)
    return _FAMILIES[family]


def decode(word: int, addr: int = 0) -> Instruction:
    """Decode an instruction word; unknown patterns get mnemonic None."""
    word &= 0xFFFF
    return Instruction(word=word, addr=addr, mnemonic=_mnemonic(word))


# Instruction executor type: returns the new PC, or None to fall through
InstructionExecutor = Callable[[Instruction, Machine], Optional[int]]


def _skip_if(condition: bool, instr: Instruction) -> Optional[int]:
    if condition:
        return instr.addr + 4
    return None


def execute_cls(instr: Instruction, m: Machine) -> Optional[int]:
    """00E0 CLS: clear the display"""
    m.display.clear()
    return None


def execute_ret(instr: Instruction, m: Machine) -> Optional[int]:
    """00EE RET: PC := pop()"""
    return m.cpu.pop()


def execute_sys(instr: Instruction, m: Machine) -> Optional[int]:
    """0nnn SYS addr: machine code call, ignored"""
    return None


def execute_jp(instr: Instruction, m: Machine) -> Optional[int]:
    """1nnn JP addr: PC := nnn"""
    return instr.nnn


def execute_call(instr: Instruction, m: Machine) -> Optional[int]:
    """2nnn CALL addr: push(PC + 2), PC := nnn"""
    m.cpu.push(instr.addr + 2)
    return instr.nnn


def execute_se_byte(instr: Instruction, m: Machine) -> Optional[int]:
    """3xkk SE Vx, byte: skip if Vx == kk"""
    return _skip_if(m.cpu.v[instr.x] == instr.kk, instr)


def execute_sne_byte(instr: Instruction, m: Machine) -> Optional[int]:
    """4xkk SNE Vx, byte: skip if Vx != kk"""
    return _skip_if(m.cpu.v[instr.x] != instr.kk, instr)


def execute_se_reg(instr: Instruction, m: Machine) -> Optional[int]:
    """5xy0 SE Vx, Vy: skip if Vx == Vy"""
    return _skip_if(m.cpu.v[instr.x] == m.cpu.v[instr.y], instr)


def execute_sne_reg(instr: Instruction, m: Machine) -> Optional[int]:
    """9xy0 SNE Vx, Vy: skip if Vx != Vy"""
    return _skip_if(m.cpu.v[instr.x] != m.cpu.v[instr.y], instr)


def execute_ld_byte(instr: Instruction, m: Machine) -> Optional[int]:
    """6xkk LD Vx, byte: Vx := kk"""
    m.cpu.set_v(instr.x, instr.kk)
    return None


def execute_add_byte(instr: Instruction, m: Machine) -> Optional[int]:
    """7xkk ADD Vx, byte: Vx := Vx + kk, VF untouched"""
    m.cpu.set_v(instr.x, m.cpu.v[instr.x] + instr.kk)
    return None


def execute_ld_reg(instr: Instruction, m: Machine) -> Optional[int]:
    """8xy0 LD Vx, Vy: Vx := Vy"""
    m.cpu.set_v(instr.x, m.cpu.v[instr.y])
    return None


def _logic(instr: Instruction, m: Machine, result: int) -> Optional[int]:
    m.cpu.set_v(instr.x, result)
    if m.quirks.logic_resets_vf:
        m.cpu.set_v(0xF, 0)
    return None


def execute_or(instr: Instruction, m: Machine) -> Optional[int]:
    """8xy1 OR Vx, Vy"""
    return _logic(instr, m, m.cpu.v[instr.x] | m.cpu.v[instr.y])


def execute_and(instr: Instruction, m: Machine) -> Optional[int]:
    """8xy2 AND Vx, Vy"""
    return _logic(instr, m, m.cpu.v[instr.x] & m.cpu.v[instr.y])


def execute_xor(instr: Instruction, m: Machine) -> Optional[int]:
    """8xy3 XOR Vx, Vy"""
    return _logic(instr, m, m.cpu.v[instr.x] ^ m.cpu.v[instr.y])


def execute_add_reg(instr: Instruction, m: Machine) -> Optional[int]:
    """8xy4 ADD Vx, Vy: VF := carry"""
    total = m.cpu.v[instr.x] + m.cpu.v[instr.y]
    m.cpu.set_v(instr.x, total)
    m.cpu.set_v(0xF, 1 if total > 0xFF else 0)
    return None


def execute_sub(instr: Instruction, m: Machine) -> Optional[int]:
    """8xy5 SUB Vx, Vy: Vx := Vx - Vy, VF := NOT borrow"""
    vx, vy = m.cpu.v[instr.x], m.cpu.v[instr.y]
    m.cpu.set_v(instr.x, vx - vy)
    m.cpu.set_v(0xF, 1 if vx >= vy else 0)
    return None


def execute_subn(instr: Instruction, m: Machine) -> Optional[int]:
    """8xy7 SUBN Vx, Vy: Vx := Vy - Vx, VF := NOT borrow"""
    vx, vy = m.cpu.v[instr.x], m.cpu.v[instr.y]
    m.cpu.set_v(instr.x, vy - vx)
    m.cpu.set_v(0xF, 1 if vy >= vx else 0)
    return None


def _shift_source(instr: Instruction, m: Machine) -> int:
    if m.quirks.shift_uses_vy:
        return m.cpu.v[instr.y]
    return m.cpu.v[instr.x]


def execute_shr(instr: Instruction, m: Machine) -> Optional[int]:
    """8xy6 SHR Vx: VF := bit shifted out (LSB)"""
    value = _shift_source(instr, m)
    m.cpu.set_v(instr.x, value >> 1)
    m.cpu.set_v(0xF, value & 0x1)
    return None


def execute_shl(instr: Instruction, m: Machine) -> Optional[int]:
    """8xyE SHL Vx: VF := bit shifted out (MSB)"""
    value = _shift_source(instr, m)
    m.cpu.set_v(instr.x, value << 1)
    m.cpu.set_v(0xF, (value >> 7) & 0x1)
    return None


def execute_ld_i(instr: Instruction, m: Machine) -> Optional[int]:
    """Annn LD I, addr: I := nnn"""
    m.cpu.set_i(instr.nnn)
    return None


def execute_jp_v0(instr: Instruction, m: Machine) -> Optional[int]:
    """Bnnn JP V0, addr: PC := nnn + V0"""
    offset = m.cpu.v[instr.x] if m.quirks.jump_uses_vx else m.cpu.v[0]
    return instr.nnn + offset


def execute_rnd(instr: Instruction, m: Machine) -> Optional[int]:
    """Cxkk RND Vx, byte: Vx := random byte AND kk"""
    m.cpu.set_v(instr.x, m.rng.randrange(256) & instr.kk)
    return None


def execute_drw(instr: Instruction, m: Machine) -> Optional[int]:
    """Dxyn DRW Vx, Vy, n: XOR n-row sprite at I, VF := collision"""
    rows = m.memory.read_block(m.cpu.i, instr.n)
    x, y = m.cpu.v[instr.x], m.cpu.v[instr.y]
    m.cpu.set_v(0xF, 0)
    if m.display.draw_sprite(x, y, rows):
        m.cpu.set_v(0xF, 1)
    return None


def execute_skp(instr: Instruction, m: Machine) -> Optional[int]:
    """Ex9E SKP Vx: skip if key Vx is pressed"""
    return _skip_if(m.keypad.is_pressed(m.cpu.v[instr.x]), instr)


def execute_sknp(instr: Instruction, m: Machine) -> Optional[int]:
    """ExA1 SKNP Vx: skip if key Vx is not pressed"""
    return _skip_if(not m.keypad.is_pressed(m.cpu.v[instr.x]), instr)


def execute_ld_vx_dt(instr: Instruction, m: Machine) -> Optional[int]:
    """Fx07 LD Vx, DT"""
    m.cpu.set_v(instr.x, m.timers.delay_timer)
    return None


def execute_ld_k(instr: Instruction, m: Machine) -> Optional[int]:
    """Fx0A LD Vx, K: wait for a key press, Vx := key"""
    key = m.keypad.first_pressed()
    if key is not None:
        m.cpu.set_v(instr.x, key)
        return None
    m.cpu.await_key(instr.x)
    return instr.addr


def execute_ld_dt(instr: Instruction, m: Machine) -> Optional[int]:
    """Fx15 LD DT, Vx"""
    m.timers.set_delay(m.cpu.v[instr.x])
    return None


def execute_ld_st(instr: Instruction, m: Machine) -> Optional[int]:
    """Fx18 LD ST, Vx"""
    m.timers.set_sound(m.cpu.v[instr.x])
    return None


def execute_add_i(instr: Instruction, m: Machine) -> Optional[int]:
    """Fx1E ADD I, Vx"""
    m.cpu.set_i(m.cpu.i + m.cpu.v[instr.x])
    return None


def execute_ld_f(instr: Instruction, m: Machine) -> Optional[int]:
    """Fx29 LD F, Vx: I := address of glyph Vx"""
    m.cpu.set_i(glyph_address(m.cpu.v[instr.x]))
    return None


def execute_ld_b(instr: Instruction, m: Machine) -> Optional[int]:
    """Fx33 LD B, Vx: [I..I+2] := hundreds, tens, ones of Vx"""
    value = m.cpu.v[instr.x]
    m.memory.write_block(m.cpu.i, (value // 100, value // 10 % 10, value % 10))
    return None


def execute_ld_mem(instr: Instruction, m: Machine) -> Optional[int]:
    """Fx55 LD [I], Vx: store V0..Vx at I"""
    m.memory.write_block(m.cpu.i, m.cpu.v[:instr.x + 1])
    if m.quirks.load_store_increments_i:
        m.cpu.set_i(m.cpu.i + instr.x + 1)
    return None


def execute_ld_regs(instr: Instruction, m: Machine) -> Optional[int]:
    """Fx65 LD Vx, [I]: load V0..Vx from I"""
    for index, value in enumerate(m.memory.read_block(m.cpu.i, instr.x + 1)):
        m.cpu.set_v(index, value)
    if m.quirks.load_store_increments_i:
        m.cpu.set_i(m.cpu.i + instr.x + 1)
    return None


# Instruction dispatch table
INSTRUCTION_EXECUTORS: dict[str, InstructionExecutor] = {
    "CLS": execute_cls,
    "RET": execute_ret,
    "SYS": execute_sys,
    "JP": execute_jp,
    "CALL": execute_call,
    "SE_BYTE": execute_se_byte,
    "SNE_BYTE": execute_sne_byte,
    "SE_REG": execute_se_reg,
    "SNE_REG": execute_sne_reg,
    "LD_BYTE": execute_ld_byte,
    "ADD_BYTE": execute_add_byte,
    "LD_REG": execute_ld_reg,
    "OR": execute_or,
    "AND": execute_and,
    "XOR": execute_xor,
    "ADD_REG": execute_add_reg,
    "SUB": execute_sub,
    "SUBN": execute_subn,
    "SHR": execute_shr,
    "SHL": execute_shl,
    "LD_I": execute_ld_i,
    "JP_V0": execute_jp_v0,
    "RND": execute_rnd,
    "DRW": execute_drw,
    "SKP": execute_skp,
    "SKNP": execute_sknp,
    "LD_VX_DT": execute_ld_vx_dt,
    "LD_K": execute_ld_k,
    "LD_DT": execute_ld_dt,
    "LD_ST": execute_ld_st,
    "ADD_I": execute_add_i,
    "LD_F": execute_ld_f,
    "LD_B": execute_ld_b,
    "LD_MEM": execute_ld_mem,
    "LD_REGS": execute_ld_regs,
}


def execute_instruction(instr: Instruction, m: Machine) -> Optional[int]:
    """Execute a single decoded instruction.

    Returns:
        New PC value if the instruction transfers control, None otherwise
    """
    executor = INSTRUCTION_EXECUTORS.get(instr.mnemonic)
    if executor is None:
        raise ValueError(f"No executor for opcode: {instr.word:04X}")
    return executor(instr, m)
