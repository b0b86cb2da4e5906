from othello.config import CONFIG


def format_cell(cell) -> str:
    return f"({cell[0]},{cell[1]})" if cell is not None else "-"


def print_info(d, score, nodes, elapsed, move):
    if CONFIG.log_level.upper() not in ("DEBUG", "INFO"):
        return
    nps = int(nodes / elapsed) if elapsed > 0 else 0
    pv_str = format_cell(move.cell) if move is not None else "-"
    print(f"info depth {d} score {score:.2f} nodes {nodes} nps {nps} time {int(elapsed * 1000)} pv {pv_str}")
