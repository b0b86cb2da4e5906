import sys
import time

from othello.config import CONFIG
from othello.core.board import Piece
from othello.game import Game, GameMode, GameState


def describe_outcome(game: Game) -> str:
    outcome = game.outcome()
    text = f"Black: {outcome.black_count}  White: {outcome.white_count}\n"
    if outcome.winner is None:
        return text + "Draw (equal pieces and equal time)"
    if outcome.decided_by_time:
        return text + f"Tie on pieces! {outcome.winner.label} used less time and wins"
    return text + f"{outcome.winner.label} wins"


def read_cell(prompt: str):
    raw = input(prompt).strip().lower()
    if raw in ("pass", "undo", "quit"):
        return raw
    parts = raw.replace(",", " ").split()
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        return None
    return int(parts[0]), int(parts[1])


def play(mode: GameMode, human_color: Piece = Piece.BLACK, difficulty: str = None, delay: float = 0.0):
    game = Game()
    game.new_game(mode, human_color=human_color, difficulty=difficulty)

    while game.state is not GameState.ENDED:
        game.board.print_board()
        print("----------------------------")

        if game.is_computer_turn:
            if delay:
                time.sleep(delay)
            result = game.play_computer_turn()
            if result.move is None:
                print(f"Computer ({game.current_player.opponent.label}) passes")
            else:
                text = f"Computer plays: {result.move}"
                if result.returned is not None:
                    text += f" | returns {result.returned}"
                print(text)
            continue

        if game.state is GameState.AWAITING_RETURN_SELECTION:
            candidates = game.pending_return.candidates
            choice = read_cell(f"Choose a piece to return {list(candidates)}: ")
            if choice == "quit":
                return game
            if not isinstance(choice, tuple) or not game.submit_return_selection(*choice).applied:
                print("Not a candidate, try again.")
            continue

        if game.must_pass:
            print(f"{game.current_player.label} has no legal moves and must pass.")

        choice = read_cell(f"{game.current_player.label} to move (row col / pass / undo / quit): ")
        if choice == "quit":
            return game
        if choice == "pass":
            result = game.pass_turn()
        elif choice == "undo":
            result = game.undo()
        elif choice is None:
            print("Enter a move as 'row col', e.g. 2 3")
            continue
        else:
            result = game.submit_move(*choice)
        if not result.applied:
            print(f"Rejected: {result.rejection.value}")

    game.board.print_board()
    print("Game Over")
    print(describe_outcome(game))
    return game


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if argv and argv[0] == "pvp":
        return play(GameMode.PLAYER_VS_PLAYER)
    color = Piece.WHITE if "white" in argv else Piece.BLACK
    difficulty = next((a for a in argv if a in CONFIG.search.difficulties), None)
    return play(GameMode.PLAYER_VS_AI, color, difficulty, delay=CONFIG.search.ai_move_delay_ms / 1000.0)


if __name__ == "__main__":
    main()
