from authoring_upgrade.cli import main

if __name__ == "__main__":
    main()
