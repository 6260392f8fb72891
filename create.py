# create.py: create (or look up) a user and print an API token for them
from timecapsule import create_app
from timecapsule.auth import issue_api_token
from timecapsule.extensions import db
from timecapsule.models.user import User


def main():
    app = create_app()
    with app.app_context():
        email = input("Email: ").strip().lower()
        user = User.query.filter_by(email=email).first()
        if user:
            print(f"User {email} already exists.")
        else:
            name = input("Full name: ").strip()
            opt_in = input("Email me when capsules unlock? [Y/n]: ").strip().lower()
            user = User(name=name, email=email, email_notifications=opt_in not in ("n", "no"))
            db.session.add(user)
            db.session.commit()
            print(f"User {email} created successfully.")

        print(f"API token: {issue_api_token(user)}")

if __name__ == "__main__":
    main()
