"""Entry point for the lingoduel CLI client."""

import argparse
import sys

import requests

from cli.api_client import DuelAPIClient
from cli.console import ConsoleUI, error_detail


def main():
    parser = argparse.ArgumentParser(description='Lingoduel - two-player vocabulary duels')
    parser.add_argument(
        '--server',
        default='http://localhost:8000',
        help='Server URL (default: http://localhost:8000)'
    )
    parser.add_argument(
        '--user',
        required=True,
        help='Your user ID'
    )
    parser.add_argument('--duel', help='Join an existing duel by ID')
    parser.add_argument('--challenge', metavar='OPPONENT', help='Challenge another user')
    parser.add_argument('--theme', help='Theme ID for a new challenge')
    parser.add_argument('--mode', choices=['classic', 'solo-style'], default='classic')
    parser.add_argument('--difficulty', choices=['easy', 'medium', 'hard'], default='easy')
    parser.add_argument('--words', type=int, help='Number of words (default: whole theme)')
    args = parser.parse_args()

    client = DuelAPIClient(base_url=args.server, user_id=args.user)

    duel_id = args.duel
    if args.challenge:
        if not args.theme:
            parser.error('--challenge needs --theme')
        try:
            view = client.create_duel(args.challenge, args.theme, args.mode, args.difficulty, args.words)
        except requests.RequestException as e:
            print(f"Error: could not create duel: {error_detail(e)}")
            sys.exit(1)
        duel_id = view['duel_id']
        print(f"Created duel {duel_id}. Your opponent joins with --duel {duel_id}")
    if not duel_id:
        parser.error('either --duel or --challenge is required')

    ui = ConsoleUI(client, duel_id)

    try:
        ui.run()
    except KeyboardInterrupt:
        print('\nGoodbye!')
        sys.exit(0)


if __name__ == '__main__':
    main()
