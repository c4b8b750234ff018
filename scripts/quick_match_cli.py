#!/usr/bin/env python3
# =============================================================================
# scripts/quick_match_cli.py - Interactive Quick Match in the Terminal
# =============================================================================
# Drives the client core from a terminal: sign in, then swipe through
# candidates one at a time.
#
# Usage:
#   python scripts/quick_match_cli.py
#   python scripts/quick_match_cli.py --register
#
# Commands:
#   l / like       - Like the current candidate
#   p / pass       - Pass on the current candidate
#   /matches       - List mutual matches
#   /likes         - List people who liked you
#   /reset         - Start the session over
#   /logout        - Sign out and quit
#   /quit or /exit - Quit
#   /help          - Show help
# =============================================================================

import argparse
import asyncio
import getpass
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from app.exceptions import NexoError
from app.main import NexoClient, configure_logging, create_client
from core.models.profile import Profile
from core.models.session import SwipeSessionState


def print_help():
    print("""
  Commands:
    l, like      Like the current candidate
    p, pass      Pass on the current candidate
    /matches     List mutual matches
    /likes       List people who liked you
    /reset       Start the session over
    /logout      Sign out and quit
    /quit        Quit
""")


def print_candidate(profile: Profile, upcoming: tuple[Profile, ...]):
    print()
    print(f"  {profile.name}, {profile.age}  ·  {profile.location}  ·  {profile.distance_label}")
    if profile.bio:
        print(f"  {profile.bio}")
    if profile.sports:
        sports = ", ".join(f"{s.icon} {s.name} ({s.level})" for s in profile.sports)
        print(f"  Sports: {sports}")
    if profile.interests:
        print(f"  Interests: {', '.join(profile.interests)}")
    print(f"  Rating {profile.rating:.1f}  ·  {profile.activities_joined_count} activities joined")
    if upcoming:
        print(f"  Up next: {', '.join(p.name for p in upcoming)}")


def match_announcer():
    """Subscriber that prints each new match once, as soon as it arrives."""
    announced: set[str] = set()

    def on_state(state: SwipeSessionState):
        match = state.pending_match
        if match is not None and match.id not in announced:
            announced.add(match.id)
            print(f"\n  *** It's a match with {match.name}! ***")

    return on_state


async def prompt(text: str) -> str:
    return (await asyncio.to_thread(input, text)).strip()


async def sign_in(client: NexoClient, register: bool) -> bool:
    if client.auth.is_logged_in and not register:
        print("  Restored saved session.")
        return True

    email = await prompt("Email: ")
    password = await asyncio.to_thread(getpass.getpass, "Password: ")

    try:
        if register:
            name = await prompt("Name: ")
            location = await prompt("Location: ")
            user = await client.auth.register(email, password, name, location)
        else:
            user = await client.auth.login(email, password)
    except NexoError as e:
        print(f"  ! {e.user_message}")
        return False

    print(f"  Signed in as {user.email}")
    return True


async def run(register: bool):
    configure_logging()

    async with create_client() as client:
        if not await sign_in(client, register):
            return

        engine = client.quick_match
        engine.subscribe(match_announcer())
        await engine.start()
        print_help()

        while True:
            await engine.wait_until_idle()
            state = engine.snapshot
            if state.error_message:
                print(f"\n  ! {state.error_message}")
                engine.clear_error()

            candidate = state.current_candidate
            if candidate is None:
                if state.is_complete:
                    print("\n  No more profiles. /reset to start over or /quit.")
                elif state.pagination.has_more and not state.is_loading:
                    await engine.load_page()
                    if engine.snapshot.error_message is None:
                        continue
                    print("\n  Could not load more profiles. Press enter to retry.")
            else:
                print_candidate(candidate, state.next_candidates)
                print(f"  Liked this session: {state.liked_count}")

            command = (await prompt("\n> ")).lower()

            if command in ("/quit", "/exit"):
                break
            elif not command:
                continue
            elif command == "/help":
                print_help()
            elif command in ("l", "like"):
                if not engine.like_current():
                    print("  Nothing to like.")
            elif command in ("p", "pass"):
                if not engine.pass_current():
                    print("  Nothing to pass.")
            elif command == "/matches":
                matches = await engine.fetch_matches()
                for match in matches:
                    chatted = "chatted" if match.has_chatted else "new"
                    print(f"  - {match.user.name or match.user.id} ({chatted})")
                if not matches:
                    print("  No matches yet.")
            elif command == "/likes":
                likes = await engine.fetch_likes_received()
                for like in likes:
                    flag = " (match)" if like.is_match else ""
                    print(f"  - {like.from_user.name or like.from_user.id}{flag}")
                if not likes:
                    print("  No likes yet.")
            elif command == "/reset":
                await engine.start()
            elif command == "/logout":
                client.auth.logout()
                print("  Signed out.")
                break
            else:
                print("  Unknown command. /help for commands.")


def main():
    parser = argparse.ArgumentParser(description="Swipe through NEXO quick-match candidates")
    parser.add_argument("--register", action="store_true", help="Create an account first")
    args = parser.parse_args()

    try:
        asyncio.run(run(args.register))
    except (KeyboardInterrupt, EOFError):
        print("\n  Bye.")


if __name__ == "__main__":
    main()
